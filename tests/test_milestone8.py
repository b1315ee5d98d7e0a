import dataclasses
import logging

import pytest

from src.oracle.core.content import ContentSchemaError, load_event_registry
from src.oracle.events.alchemize import CardBuilder, alchemize, omen_chance, omen_roll
from src.oracle.events.diff import diff_worlds
from src.oracle.events.registry import EventRegistry


@pytest.fixture
def worlds(small_world):
    prev = small_world.snapshot()
    small_world.tick = 1
    return prev, small_world


def test_registry_loads_every_card(config):
    ids = {t.id for t in config.events.all_templates()}
    assert len(ids) == 24
    assert {"grain_shortage", "territory_acquired", "faction_allied", "good_sign", "false_prophet"} <= ids

    template = config.events.get("grain_shortage")
    assert [c.id for c in template.choices] == ["ration_grain", "buy_grain", "raid_neighbors"]
    assert template.choices[1].costs == {"gold": 150}

    with pytest.raises(ValueError, match="not found"):
        config.events.get("plague_of_frogs")


def test_registry_missing_text(tmp_path):
    path = tmp_path / "events.yaml"
    path.write_text("""
silent_card:
  choices: []
""")
    with pytest.raises(ContentSchemaError, match="Missing key 'text'"):
        load_event_registry(path)


def test_registry_rejects_unknown_placeholder(tmp_path):
    path = tmp_path / "events.yaml"
    path.write_text("""
plague:
  text: "A plague strikes {region}, killing {victims}."
  choices: []
""")
    with pytest.raises(ContentSchemaError, match=r"Unknown placeholder '\{victims\}' in event template 'plague'"):
        load_event_registry(path)


def test_diff_worlds(worlds):
    prev, after = worlds
    after.resources.grain -= 50
    after.regions[1].controlled = True
    after.regions[0].piety += 4
    after.regions[0].heresy += 6
    after.factions[0].stance = "allied"
    after.add_trait("winter")

    diff = diff_worlds(prev, after)

    assert diff.resources == {"grain": -50}
    assert [(c.region_id, c.controlled) for c in diff.control] == [("region_1", True)]
    assert [d.region_id for d in diff.regions] == ["region_0"]
    assert diff.regions[0].pressures["heresy"] == 6
    assert [(s.faction_id, s.before, s.after) for s in diff.stances] == [("faction_0", "neutral", "allied")]
    assert diff.new_traits == ["winter"]


def test_small_region_changes_are_ignored(worlds):
    prev, after = worlds
    after.regions[0].lawfulness += 4
    assert diff_worlds(prev, after).regions == []


def test_alchemize_ranks_by_magnitude(config, worlds):
    prev, after = worlds
    after.resources.grain -= 50
    after.legitimacy.law += 10
    after.regions[1].controlled = True
    after.factions[0].stance = "allied"

    cards = alchemize(prev, after, config.events)

    assert [c.type for c in cards] == ["grain_shortage", "territory_acquired", "faction_allied"]
    assert [c.magnitude for c in cards] == [50, 25, 15]
    assert cards[0].id == "grain_shortage_1"
    assert "Grain fell by 50." in cards[0].text
    assert "Frontier" in cards[1].text
    assert cards[1].region_id == "region_1"
    assert cards[2].text.startswith("Iron Crown has offered")
    assert cards[2].faction_id == "faction_0"


def test_alchemize_limit(config, worlds):
    prev, after = worlds
    after.resources.grain -= 50
    after.legitimacy.law += 10

    assert len(alchemize(prev, after, config.events, limit=1)) == 1
    assert alchemize(prev, after, config.events, limit=0) == []


def test_quiet_tick_has_few_cards(config, worlds):
    prev, after = worlds
    cards = alchemize(prev, after, config.events)
    # Only omens can fire when nothing changed.
    assert all(c.type in ("good_sign", "dire_sign", "false_prophet") for c in cards)


def test_legitimacy_decline_card(config, worlds):
    prev, after = worlds
    after.legitimacy.faith -= 12
    after.legitimacy.law += 6

    cards = alchemize(prev, after, config.events)
    decline = next_card(cards, "legitimacy_decline")

    assert decline.magnitude == 12
    assert "Your faith legitimacy has slipped" in decline.text
    assert "decreased by 12" in decline.text
    assert next_card(cards, "law_legitimacy_boost") is None


def test_justice_cards(config, worlds):
    prev, after = worlds
    after.regions[0].lawfulness = 25
    after.regions[0].unrest = 40
    after.add_trait("high_crime")

    cards = alchemize(prev, after, config.events, limit=10)
    ids = [c.id for c in cards]

    assert "lawfulness_declined_1_region_0" in ids
    assert "unrest_calmed_1_region_0" in ids
    crisis = next_card(cards, "crime_crisis")
    assert crisis.magnitude == 20
    assert crisis.region_id == "region_0"


def test_faith_cards_skip_uncontrolled_regions(config, worlds):
    prev, after = worlds
    after.regions[0].piety = 62
    after.regions[1].piety = 80

    cards = alchemize(prev, after, config.events, limit=10)
    assert [c.id for c in cards if c.type == "piety_surge"] == ["piety_surge_1_region_0"]


def test_omen_chance_and_roll(worlds):
    _, world = worlds
    home = world.regions[0]

    assert omen_chance(home, world) == pytest.approx(0.02)
    home.piety = 80
    world.legitimacy.faith = 30
    assert omen_chance(home, world) == pytest.approx(0.07)

    assert omen_roll(world, home) == omen_roll(world, home)
    assert 0.0 <= omen_roll(world, home) < 1.0


def test_missing_template_skips_card(worlds, caplog):
    _, world = worlds
    with caplog.at_level(logging.WARNING):
        card = CardBuilder(EventRegistry(), world).build("grain_shortage", 30)
    assert card is None
    assert "No event template for 'grain_shortage'" in caplog.text


def test_cards_are_immutable(config, worlds):
    _, world = worlds
    card = CardBuilder(config.events, world).build("unrest_rising", 22, delta=22)
    assert card.text.endswith("Unrest rose by 22.**")
    with pytest.raises(dataclasses.FrozenInstanceError):
        card.magnitude = 1


def next_card(cards, card_type):
    return next((c for c in cards if c.type == card_type), None)
