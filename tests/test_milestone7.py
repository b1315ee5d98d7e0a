import pytest

from src.oracle.core.log import AuditLog
from src.oracle.core.sim import apply_action, step
from src.oracle.drift.economy import is_winter
from src.oracle.drift.regions import drift_toward_midpoint
from src.oracle.planning.actions import ActionProposal
from src.oracle.rules.effects import LegitimacyEffect, RegionEffect
from src.oracle.world.model import WorldState


def test_step_without_actions(small_world):
    report = step(small_world)

    assert report.tick == 1
    assert small_world.tick == 1
    assert small_world.resources.to_dict() == {"gold": 192, "grain": 145, "iron": 51, "stone": 51, "wood": 83}
    assert small_world.people.loyalty == 58
    assert small_world.people.unrest == 18
    assert small_world.forces.supply == 80
    assert small_world.forces.morale == 70
    assert small_world.regions[0].security == pytest.approx(0.52)
    assert small_world.regions[1].security == pytest.approx(0.49)
    assert [f.power for f in small_world.factions] == [61, 25]


def test_step_logs_every_stage_in_order(small_world):
    report = step(small_world)
    types = [e.type for e in report.log.entries]

    assert types[0] == "actions"
    assert types[1] == "factions.step"
    assert types.index("economy.production.output") < types.index("economy.upkeep")
    assert types.index("economy.upkeep") < types.index("politics.drift")
    assert types.index("politics.drift") < types.index("regions.security")
    assert all(e.tick == 1 for e in report.log.entries)


def test_winter_costs_grain(small_world):
    small_world.tick = 2
    step(small_world)

    assert is_winter(3)
    assert small_world.resources.grain == 135
    assert small_world.has_trait("winter")

    step(small_world)
    assert not small_world.has_trait("winter")


def test_grain_shortage(small_world):
    small_world.resources.grain = 20
    report = step(small_world)

    assert small_world.has_trait("grain_shortage")
    # +10 from the shortage, +5 because the granary is nearly empty.
    assert small_world.people.unrest == 35
    assert report.log.of_type("economy.scarcity")


def test_bureaucracy(small_world):
    small_world.regions[0].lawfulness = 80
    small_world.regions[0].unrest = 20
    report = step(small_world)

    assert small_world.regions[0].lawfulness == 79
    assert small_world.regions[0].unrest == 21
    assert small_world.resources.gold == 188
    assert small_world.has_trait("high_bureaucracy")
    assert report.log.of_type("justice.bureaucracy")[0].delta == -4


def test_crime(small_world):
    small_world.regions[0].lawfulness = 20
    small_world.legitimacy.law = 30
    report = step(small_world)

    assert small_world.regions[0].lawfulness == 19
    assert small_world.has_trait("high_crime")
    assert small_world.regions[0].security == pytest.approx(0.47)
    assert small_world.regions[0].people.loyalty == pytest.approx(0.57)
    assert report.log.of_type("justice.crime")


def test_faith_decline(small_world):
    small_world.legitimacy.faith = 30
    report = step(small_world)

    assert 47 <= small_world.regions[0].piety <= 49
    assert small_world.regions[0].heresy == 51
    # Uncontrolled regions are left alone.
    assert small_world.regions[1].piety == 50
    assert report.log.of_type("faith.decline")


def test_faith_decline_is_seeded(small_world):
    other = small_world.snapshot()
    small_world.legitimacy.faith = 30
    other.legitimacy.faith = 30

    step(small_world)
    step(other)
    assert small_world.regions[0].piety == other.regions[0].piety


def test_heresy_pressure(small_world):
    small_world.regions[0].heresy = 80
    step(small_world)

    assert small_world.has_trait("heresy_pressure")
    assert small_world.regions[0].people.loyalty == pytest.approx(0.55)


def test_festival(small_world):
    small_world.regions[0].piety = 80
    report = step(small_world)

    assert small_world.regions[0].unrest == 49
    assert small_world.resources.gold == 182
    assert report.log.of_type("faith.festival")


def test_people_action(small_world):
    action = ActionProposal(id="people_justice", label="Hold Open Courts", satisfies=("people",), costs={"gold": 20})
    report = step(small_world, [action])

    assert small_world.people.loyalty == 68
    assert small_world.people.unrest == 13
    assert small_world.resources.gold == 172
    assert report.log.of_type("actions.resolved")[0].details["action_id"] == "people_justice"


def test_land_action_annexes_frontier(small_world):
    action = ActionProposal(id="land_purchase", label="Purchase a Border Province", satisfies=("land",))
    report = step(small_world, [action])

    assert small_world.regions[1].controlled
    assert small_world.faction("faction_0").regions == []
    assert small_world.faction("faction_0").power == 55
    assert report.log.of_type("actions.annex")[0].region_id == "region_1"


def test_conquest_and_charity_traits(small_world):
    conquest = ActionProposal(id="land_conquest", label="Conquer")
    step(small_world, [conquest])

    assert small_world.has_trait("conqueror")
    # Neutral factions turn hostile toward a conqueror.
    assert small_world.faction("faction_0").stance == "hostile"

    charity = ActionProposal(id="people_charity", label="Charity")
    step(small_world, [charity])
    assert small_world.has_trait("generous")


def test_army_action(small_world):
    action = ActionProposal(id="army_mercenaries", label="Hire Mercenaries", satisfies=("army",))
    step(small_world, [action])

    assert small_world.forces.units == 40
    assert small_world.forces.morale == 75


def test_apply_action_effects_hit_home_region(small_world):
    action = ActionProposal(
        id="law_justice_dispensation",
        label="Dispense Royal Justice",
        costs={"gold": 30},
        effects=(LegitimacyEffect("law", 5.0), RegionEffect("lawfulness", 5.0)),
    )
    log = AuditLog()
    apply_action(small_world, action, log)

    assert small_world.legitimacy.law == 60
    assert small_world.regions[0].lawfulness == 55
    assert small_world.regions[1].lawfulness == 50
    assert log.entries[-1].details["effects"] == 2


def test_empty_world_tick_is_total():
    world = WorldState(seed=1)
    report = step(world)
    assert report.tick == 1
    assert world.resources.to_dict() == {"gold": 0, "grain": 0, "iron": 0, "stone": 0, "wood": 0}


def test_drift_toward_midpoint_does_not_overshoot(small_world):
    region = small_world.regions[0]
    region.unrest = 50.5
    drift_toward_midpoint(region, "unrest")
    assert region.unrest == 50
    region.piety = 30
    drift_toward_midpoint(region, "piety", rate=3)
    assert region.piety == 33
