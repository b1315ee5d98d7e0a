import pytest

from src.oracle.core.session import advance, start_session
from src.oracle.core.sim import step
from src.oracle.io.save_load import to_dict


def test_just_king_scenario(config):
    session = start_session("I wish to be a just king who rules with wisdom", seed=12345, config=config)

    assert session.profile.domains["virtue"] >= 0.3
    assert session.profile.domains["power"] >= 0.2
    lawfulness = [r.lawfulness for r in session.world.regions]
    assert sum(lawfulness) / len(lawfulness) >= 60


def test_empty_ambition_scenario(config):
    session = start_session("", seed=99999, config=config)

    for weight in session.profile.domains.values():
        assert weight == pytest.approx(1 / 6)
    assert 6 <= len(session.world.regions) <= 10
    assert session.proposals


def test_lawful_region_drifts_to_midpoint(config):
    session = start_session("I want to build a great library", seed=5, config=config)
    region = session.world.home_region()
    region.lawfulness = 80
    region.unrest = 20
    # Keep festivals out of the picture.
    region.piety = 50

    step(session.world)

    assert 50 <= region.lawfulness < 80
    assert 20 < region.unrest <= 50


def test_sessions_with_same_seed_stay_identical(config):
    text = "I want to become a wise and just ruler who protects the people"
    first = start_session(text, seed=2024, config=config)
    second = start_session(text, seed=2024, config=config)

    for _ in range(3):
        action_id = first.proposals[0].id if first.proposals else None
        advance(first, action_id)
        advance(second, action_id)

        assert first.world == second.world
        assert first.profile == second.profile
        assert first.proposals == second.proposals
        assert to_dict(first) == to_dict(second)


def test_long_game_stays_in_bounds(config):
    session = start_session("I will conquer every kingdom and rule with an iron fist", seed=31337, config=config)

    for _ in range(12):
        advance(session, session.proposals[0].id if session.proposals else None)

    world = session.world
    assert world.tick == 12
    for value in world.resources.to_dict().values():
        assert value >= 0
    for region in world.regions:
        assert 0.0 <= region.security <= 1.0
        for pressure in (region.lawfulness, region.unrest, region.piety, region.heresy):
            assert 0 <= pressure <= 100
    for faction in world.factions:
        assert 0 <= faction.power <= 100
    assert session.profile.is_normalized()
    assert len(session.history) == 12
