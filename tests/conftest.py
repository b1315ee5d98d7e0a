import os
import tempfile
import uuid
from pathlib import Path

import pytest

from src.oracle.core.config import load_config
from src.oracle.world.model import (
    Faction, Forces, Legitimacy, People, Region, RegionPeople, Resources, WorldState,
)


def build_world(seed: int = 7) -> WorldState:
    """
    A two-region world small enough to follow by hand: a controlled home
    region and a frontier held by the Iron Crown.
    """
    home = Region(
        id="region_0",
        name="Heartland",
        controlled=True,
        resources={"gold": 40, "grain": 50, "iron": 20, "stone": 20, "wood": 30},
        people=RegionPeople(population=5000, loyalty=0.6, unrest=0.1, faith=0.5),
        security=0.5,
    )
    frontier = Region(
        id="region_1",
        name="Frontier",
        controlled=False,
        resources={"gold": 10, "grain": 20, "iron": 5, "stone": 5, "wood": 10},
        people=RegionPeople(population=2000, loyalty=0.5, unrest=0.1, faith=0.5),
        security=0.5,
    )
    factions = [
        Faction(id="faction_0", name="Iron Crown", stance="neutral", power=60.0, regions=["region_1"]),
        Faction(id="faction_1", name="Free Guild", stance="hostile", power=30.0, regions=[]),
    ]
    return WorldState(
        seed=seed,
        regions=[home, frontier],
        factions=factions,
        resources=Resources(gold=200, grain=150, iron=50, stone=50, wood=80),
        people=People(population=1000, loyalty=60.0, unrest=20.0, faith=50.0),
        forces=Forces(units=20, morale=70.0, supply=70.0),
        legitimacy=Legitimacy(law=55.0, faith=50.0, lineage=40.0, might=45.0),
        player_id="player_test",
    )


@pytest.fixture(scope="session")
def config():
    return load_config()


@pytest.fixture
def small_world() -> WorldState:
    return build_world()


@pytest.fixture
def ambition_text() -> str:
    return "I want to become a wise and just ruler who protects the people"


def pytest_configure(config):
    """Keeps pytest's temporary files inside the project directory."""
    tmp_root = Path(".pytest_tmp_local").resolve()
    tmp_root.mkdir(exist_ok=True)
    os.environ["TMPDIR"] = str(tmp_root)
    os.environ["TEMP"] = str(tmp_root)
    os.environ["TMP"] = str(tmp_root)
    tempfile.tempdir = str(tmp_root)


@pytest.fixture
def tmp_path():
    base = Path(".pytest_tmp_local").resolve()
    base.mkdir(exist_ok=True)
    path = base / f"tmp-{uuid.uuid4().hex}"
    path.mkdir(parents=True, exist_ok=True)
    return path
