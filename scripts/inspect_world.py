import argparse
import json
import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from src.oracle.core.session import start_session
from src.oracle.io.save_load import load_from_json, world_to_dict
from src.oracle.reports.gazette import render_proposals, render_world


def main():
    parser = argparse.ArgumentParser(description="Inspect a generated or saved oracle world.")
    parser.add_argument(
        "--ambition",
        type=str,
        default="I want to become a wise and just ruler who protects the people",
        help="Statement of ambition to generate a world from.",
    )
    parser.add_argument("--seed", type=int, help="Session seed.")
    parser.add_argument(
        "--from-json",
        type=str,
        help="Path to a saved session to load instead of generating one.",
    )
    parser.add_argument(
        "--region",
        type=str,
        help="ID of a single region to dump as JSON.",
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING)."
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.from_json:
        session = load_from_json(args.from_json)
        print(f"Loaded session from JSON file: {args.from_json}")
    else:
        session = start_session(args.ambition, seed=args.seed)
        print(f"Generated world with seed {session.seed}")

    world = session.world
    if args.region:
        region = world.region(args.region)
        if region is None:
            print(f"Error: Region '{args.region}' not found in the world.")
            sys.exit(1)
        region_info = next(r for r in world_to_dict(world)["regions"] if r["id"] == region.id)
        print(f"\n--- Region Information for '{region.id}' ---")
        print(json.dumps(region_info, indent=2))
        return

    print(render_world(world))
    print(render_proposals(session.proposals))

if __name__ == "__main__":
    main()
