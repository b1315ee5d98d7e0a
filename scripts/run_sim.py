import argparse
import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from src.oracle.core.config import load_config
from src.oracle.core.session import advance, start_session
from src.oracle.io.save_load import load_from_json, save_to_json
from src.oracle.reports.gazette import (
    generate_gazette, render_events, render_graph, render_profile, render_proposals,
)


def main():
    parser = argparse.ArgumentParser(description="Play an ambition forward, always taking the top proposal.")
    parser.add_argument(
        "ambition",
        nargs="?",
        default="I want to become a wise and just ruler who protects the people",
        help="Statement of ambition to start from.",
    )
    parser.add_argument("--seed", type=int, help="Session seed. Defaults to a hash of the ambition text.")
    parser.add_argument(
        "--turns", type=int, default=12, help="Number of turns to play."
    )
    parser.add_argument("--rules", type=str, help="Path to an alternative rule base YAML file.")
    parser.add_argument(
        "--resume", type=str, help="Continue from a saved JSON session instead of starting fresh."
    )
    parser.add_argument(
        "--dump-json", type=str, help="Write the final session to this JSON file."
    )
    parser.add_argument(
        "--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING)."
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = load_config(rules_path=Path(args.rules) if args.rules else None)
    if args.resume:
        session = load_from_json(args.resume, config)
        print(f"Resumed session from '{args.resume}' at tick {session.world.tick}.")
    else:
        session = start_session(args.ambition, seed=args.seed, config=config)
        print(f"Started session with seed {session.seed}.")
    print(render_profile(session.profile))
    print(render_graph(session.graph))

    for _ in range(args.turns):
        choice = session.proposals[0] if session.proposals else None
        if choice is not None:
            print(f"> {choice.label}")
        result = advance(session, choice.id if choice else None)
        print(generate_gazette(result.tick_report.log, tick=result.tick_report.tick))
        print(render_events(result.events, result.dreams))
        for node in result.new_nodes:
            print(f"New objective: {node.label}")

    print(render_graph(session.graph))
    print(render_proposals(session.proposals))

    if args.dump_json:
        save_to_json(session, args.dump_json)
        print(f"Final session dumped to {args.dump_json}")

if __name__ == "__main__":
    main()
