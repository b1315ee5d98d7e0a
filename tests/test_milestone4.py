import pytest

from src.oracle.ambition.model import AmbitionProfile
from src.oracle.core.content import DATA_DIR
from src.oracle.core.errors import UnknownRuleReference
from src.oracle.rules.conditions import Condition, conditions_hold, evaluate_condition, parse_condition
from src.oracle.rules.effects import (
    DomainEffect, LegitimacyEffect, ModifierEffect, RawEffect, RegionEffect,
    apply_world_effect, effect_to_text, parse_effect,
)
from src.oracle.rules.load import KnowledgeBaseSchemaError, load_knowledge_base


def test_load_packaged_knowledge_base():
    kb = load_knowledge_base(DATA_DIR / "rules.yaml")

    for rule_id in ("land", "army", "people", "trade", "temple", "liberty", "works", "law", "learning"):
        assert kb.has_requirement(rule_id)
    conquest = kb.requirement("land").paths["conquest"]
    assert conquest.costs == {"gold": 120, "wood": 30}
    assert conquest.time == "3 turns"
    assert conquest.effects == (
        LegitimacyEffect(axis="might", delta=5.0),
        RegionEffect(field="unrest", delta=5.0),
        DomainEffect(domain="power", delta=0.02),
    )

    bandits = next(g for g in kb.generators if g.id == "bandit_threat")
    assert bandits.rule == "people"
    assert bandits.conditions == [
        Condition(lhs="people.unrest", op=">", value=30.0),
        Condition(lhs="region.security", op="<", value=0.6),
    ]


def test_unknown_requirement_reference():
    kb = load_knowledge_base(DATA_DIR / "rules.yaml")
    with pytest.raises(UnknownRuleReference, match="Rule 'dragons' is not in the knowledge base"):
        kb.requirement("dragons", referrer="slay_dragon")
    with pytest.raises(KeyError):
        kb.requirement("dragons")


def test_parse_effect_variants():
    assert parse_effect("+legitimacy.law = 5") == LegitimacyEffect(axis="law", delta=5.0)
    assert parse_effect("-region.unrest = 4") == RegionEffect(field="unrest", delta=-4.0)
    assert parse_effect("+ambition.faith = 0.05") == DomainEffect(domain="faith", delta=0.05)
    assert parse_effect("-modifier.ruthless = 0.1") == ModifierEffect(modifier="ruthless", delta=-0.1)
    assert parse_effect("The bards sing of your deeds") == RawEffect(text="The bards sing of your deeds")


def test_parse_effect_unknown_field():
    with pytest.raises(ValueError, match="Unknown field 'charm'"):
        parse_effect("+legitimacy.charm = 3")


def test_effect_to_text_inverts_parse():
    for text in ("+legitimacy.law = 5", "-region.unrest = 4", "+ambition.faith = 0.05", "-modifier.ruthless = 0.1"):
        assert effect_to_text(parse_effect(text)) == text


def test_apply_world_effect(small_world):
    home = small_world.home_region()

    assert apply_world_effect(LegitimacyEffect("law", 50.0), small_world) is True
    assert small_world.legitimacy.law == 100

    assert apply_world_effect(RegionEffect("loyalty", 5.0), small_world, home) is True
    assert home.people.loyalty == pytest.approx(0.65)

    assert apply_world_effect(RegionEffect("security", 0.05), small_world) is True
    assert home.security == pytest.approx(0.55)

    assert apply_world_effect(RegionEffect("heresy", -60.0), small_world, home) is True
    assert home.heresy == 0

    assert apply_world_effect(DomainEffect("power", 0.1), small_world) is False
    assert apply_world_effect(RawEffect("flavour"), small_world) is False


def test_parse_condition_forms():
    assert parse_condition("grain < 50") == Condition(lhs="resources.grain", op="<", value=50.0)
    assert parse_condition("ambition.faith >= 0.3") == Condition(lhs="ambition.faith", op=">=", value=0.3)
    assert parse_condition("winter").is_trait
    assert parse_condition("gold == 10").to_text() == "resources.gold == 10"

    with pytest.raises(ValueError, match="Unknown condition subject"):
        parse_condition("mana > 3")
    with pytest.raises(ValueError, match="Malformed condition"):
        parse_condition("grain is low")


def test_evaluate_conditions(small_world):
    profile = AmbitionProfile(domains={"power": 0.5, "wealth": 0.5, "faith": 0.0, "virtue": 0.0, "freedom": 0.0, "creation": 0.0})

    assert evaluate_condition(parse_condition("grain >= 150"), small_world, profile)
    assert not evaluate_condition(parse_condition("winter"), small_world, profile)
    assert evaluate_condition(parse_condition("region.security < 0.6"), small_world, profile)
    assert evaluate_condition(parse_condition("region.population = 5000"), small_world, profile)
    assert evaluate_condition(parse_condition("ambition.power >= 0.5"), small_world, profile)
    assert not evaluate_condition(parse_condition("modifier.ruthless > 0"), small_world, profile)

    small_world.add_trait("winter")
    assert conditions_hold([parse_condition("winter"), parse_condition("people.unrest <= 20")], small_world, profile)
    assert conditions_hold([], small_world, profile)


def _write(tmp_path, text):
    path = tmp_path / "rules.yaml"
    path.write_text(text)
    return path


def test_kb_missing_paths(tmp_path):
    path = _write(tmp_path, """
requirements:
  land:
    label: Control Territory
    domains: [power]
""")
    with pytest.raises(KnowledgeBaseSchemaError, match="Missing key 'paths' in requirement 'land'"):
        load_knowledge_base(path)


def test_kb_unknown_resource(tmp_path):
    path = _write(tmp_path, """
requirements:
  land:
    label: Control Territory
    domains: [power]
    paths:
      purchase:
        label: Purchase
        costs: {mana: 10}
""")
    with pytest.raises(KnowledgeBaseSchemaError, match="Unknown resource 'mana'"):
        load_knowledge_base(path)


def test_kb_invalid_effect(tmp_path):
    path = _write(tmp_path, """
requirements:
  land:
    label: Control Territory
    domains: [power]
    paths:
      purchase:
        label: Purchase
        effects: ["+legitimacy.charm = 2"]
""")
    with pytest.raises(KnowledgeBaseSchemaError, match="Invalid effect in 'land.purchase'"):
        load_knowledge_base(path)


def test_kb_invalid_condition(tmp_path):
    path = _write(tmp_path, """
requirements: {}
generators:
  - id: odd
    conditions: ["mana > 3"]
    domains: [faith]
    action: {id: pray, label: Pray}
""")
    with pytest.raises(KnowledgeBaseSchemaError, match="Invalid condition in generator 'odd'"):
        load_knowledge_base(path)


def test_kb_duplicate_generator(tmp_path):
    path = _write(tmp_path, """
requirements: {}
generators:
  - {id: twice, conditions: [], domains: [faith], action: {id: pray, label: Pray}}
  - {id: twice, conditions: [], domains: [faith], action: {id: pray, label: Pray}}
""")
    with pytest.raises(KnowledgeBaseSchemaError, match="Duplicate generator id 'twice'"):
        load_knowledge_base(path)
