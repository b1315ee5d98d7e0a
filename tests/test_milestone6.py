import logging

import pytest

from src.oracle.ambition.model import AmbitionProfile
from src.oracle.ambition.mutation import (
    DreamDescriptor, KeywordCategory, MutationEffect, MutationTable,
    apply_action_mutation, build_dream_events, detect_dreams, mutation_impact,
)
from src.oracle.core.content import ContentSchemaError, load_mutation_table
from src.oracle.planning.actions import ActionProposal
from src.oracle.rules.effects import DomainEffect, ModifierEffect


def near_power_profile() -> AmbitionProfile:
    return AmbitionProfile(domains={
        "power": 0.39, "wealth": 0.2, "faith": 0.1, "virtue": 0.1, "freedom": 0.1, "creation": 0.11,
    })


def test_lookup_order():
    table = MutationTable(
        effects={
            "exact": MutationEffect(domains={"power": 0.1}, reason="by id"),
            "conquest": MutationEffect(domains={"power": 0.05}, reason="by category"),
            "people": MutationEffect(domains={"virtue": 0.05}, reason="by tag"),
        },
        keywords=[KeywordCategory(domain="faith", delta=0.03, words=("temple",), reason="by keyword")],
    )

    assert table.lookup(ActionProposal(id="exact", label="X", category="conquest")).reason == "by id"
    assert table.lookup(ActionProposal(id="land_conquest", label="X", category="conquest")).reason == "by category"
    assert table.lookup(ActionProposal(id="aid", label="X", satisfies=("people",))).reason == "by tag"
    assert table.lookup(ActionProposal(id="t", label="Visit the Temple")).reason == "by keyword"
    assert table.lookup(ActionProposal(id="nothing", label="Sit Quietly")) is None

    table.add_effect("nothing", MutationEffect(domains={"freedom": 0.02}, reason="added"))
    assert table.lookup(ActionProposal(id="nothing", label="Sit Quietly")).reason == "added"


def test_mutation_crosses_threshold_and_dreams(config):
    profile = near_power_profile()
    action = ActionProposal(id="quiet_reflection", label="Quiet Reflection", effects=(DomainEffect("power", 0.2),))

    mutated, dreams = apply_action_mutation(profile, action, tick=4, table=config.mutations)

    assert mutated.domains["power"] == pytest.approx(0.59 / 1.2)
    assert mutated.is_normalized()
    assert mutated.generation == 1
    assert dreams == [DreamDescriptor(domain="power", threshold=0.4, tick=4)]
    # The input profile is untouched.
    assert profile.domains["power"] == 0.39
    assert profile.generation == 0
    assert profile.mutations == []
    assert mutated.mutations[0].action_id == "quiet_reflection"


def test_unmatched_action_leaves_profile(config):
    profile = near_power_profile()
    action = ActionProposal(id="quiet_reflection", label="Quiet Reflection")

    mutated, dreams = apply_action_mutation(profile, action, tick=1, table=config.mutations)

    assert mutated is profile
    assert dreams == []


def test_table_effect_and_modifiers(config):
    profile = AmbitionProfile()
    action = ActionProposal(id="people_charity", label="Distribute Charity", category="charity",
                            effects=(ModifierEffect("peaceful", 0.1),))

    mutated, _ = apply_action_mutation(profile, action, tick=1, table=config.mutations)

    assert mutated.domains["virtue"] > profile.domains["virtue"]
    assert mutated.domains["wealth"] < profile.domains["wealth"]
    assert mutated.modifiers["peaceful"] == pytest.approx(0.12)
    assert mutated.mutations[0].reason == "Charitable acts strengthen virtue focus"


def test_detect_dreams_fires_every_crossed_threshold():
    before = AmbitionProfile(domains={"power": 0.3, "wealth": 0.7, "faith": 0.0, "virtue": 0.0, "freedom": 0.0, "creation": 0.0})
    after = AmbitionProfile(domains={"power": 0.65, "wealth": 0.35, "faith": 0.0, "virtue": 0.0, "freedom": 0.0, "creation": 0.0})

    dreams = detect_dreams(before, after, tick=2)

    assert [(d.domain, d.threshold) for d in dreams] == [("power", 0.4), ("power", 0.6)]
    # Falling below a threshold never fires.
    assert detect_dreams(after, before, tick=3) == [
        DreamDescriptor(domain="wealth", threshold=0.4, tick=3),
        DreamDescriptor(domain="wealth", threshold=0.6, tick=3),
    ]


def test_build_dream_events(config, caplog):
    dreams = [
        DreamDescriptor(domain="power", threshold=0.4, tick=4),
    ]
    events = build_dream_events(dreams, config.mutations, generation=2)

    assert events[0].id == "dream_power_40_2"
    assert events[0].title == "Dreams of Authority"

    with caplog.at_level(logging.WARNING):
        events = build_dream_events(dreams, MutationTable(), generation=1)
    assert events[0].title == "Dreams of Power"
    assert "No dream text" in caplog.text


def test_mutation_impact(config):
    profile = AmbitionProfile()
    assert mutation_impact(profile).total_mutations == 0

    action = ActionProposal(id="gather_gold", label="Gather Gold", category="gather_gold")
    for tick in range(1, 4):
        profile, _ = apply_action_mutation(profile, action, tick, config.mutations)

    impact = mutation_impact(profile)
    assert impact.total_mutations == 3
    assert impact.dominant_source == "gather_gold"
    assert impact.drift["wealth"] == pytest.approx(0.03)
    assert impact.velocity == pytest.approx(0.01)


def test_invalid_dream_threshold(tmp_path):
    invalid_yaml = """
effects: {}
dreams:
  power:
    0.5: {title: Halfway, text: Halfway there.}
"""
    path = tmp_path / "mutations.yaml"
    path.write_text(invalid_yaml)
    with pytest.raises(ContentSchemaError, match="Invalid dream threshold 0.5"):
        load_mutation_table(path)


def test_unknown_mutation_domain(tmp_path):
    invalid_yaml = """
effects:
  sorcery: {domains: {magic: 0.1}}
"""
    path = tmp_path / "mutations.yaml"
    path.write_text(invalid_yaml)
    with pytest.raises(ContentSchemaError, match="Unknown domain 'magic'"):
        load_mutation_table(path)
