import logging

from src.oracle.ambition.model import AmbitionProfile
from src.oracle.goals.model import GoalNode, RequirementGraph
from src.oracle.planning.actions import ActionProposal
from src.oracle.planning.planner import diversify, propose
from src.oracle.planning.scoring import action_domains, domain_alignment, score_action
from src.oracle.rules.model import KnowledgeBase
from src.oracle.world.model import WorldState


def virtue_profile() -> AmbitionProfile:
    return AmbitionProfile(domains={
        "power": 0.2, "wealth": 0.1, "faith": 0.1, "virtue": 0.5, "freedom": 0.0, "creation": 0.1,
    })


def protect_graph() -> RequirementGraph:
    return RequirementGraph(nodes=[
        GoalNode(id="protect_innocent", label="Protect the Innocent", domains=["virtue"], rules=["people"]),
    ])


def test_fallback_when_nothing_is_affordable():
    proposals = propose(RequirementGraph(), WorldState(seed=1), AmbitionProfile(), KnowledgeBase())
    ids = [p.id for p in proposals]

    assert "gather_gold" in ids
    assert "contemplate_ambition" in ids
    # Recruiting costs gold the empty treasury does not have.
    assert "recruit_followers" not in ids


def test_fallbacks_kept_when_they_fit_nothing(small_world):
    power_only = AmbitionProfile(domains={
        "power": 1.0, "wealth": 0.0, "faith": 0.0, "virtue": 0.0, "freedom": 0.0, "creation": 0.0,
    })
    small_world.resources.gold = 0

    proposals = propose(RequirementGraph(), small_world, power_only, KnowledgeBase())
    by_id = {p.id: p for p in proposals}

    assert "gather_gold" in by_id
    assert by_id["gather_gold"].score > 0
    assert "recruit_followers" not in by_id


def test_rule_paths_for_ready_nodes(config, small_world):
    proposals = propose(protect_graph(), small_world, virtue_profile(), config.knowledge_base, limit=5)

    assert len(proposals) == 5
    scores = [p.score for p in proposals]
    assert scores == sorted(scores, reverse=True)
    for proposal in proposals:
        assert "protect_innocent" in proposal.satisfies
        assert small_world.resources.can_afford(proposal.costs)
        assert proposal.score > 0


def test_unaffordable_paths_are_never_proposed(config, small_world):
    small_world.resources.gold = 0
    proposals = propose(protect_graph(), small_world, virtue_profile(), config.knowledge_base, limit=10)

    assert proposals
    for proposal in proposals:
        assert proposal.costs.get("gold", 0) == 0


def test_generators_when_no_node_is_ready(config, small_world):
    graph = RequirementGraph(nodes=[GoalNode(id="done", label="Done", status="met", domains=["virtue"])])
    proposals = propose(graph, small_world, virtue_profile(), config.knowledge_base)
    ids = [p.id for p in proposals]

    assert "tour_the_countryside" in ids
    assert "gather_gold" not in ids


def test_propose_is_deterministic(config, small_world):
    graph = protect_graph()
    first = propose(graph, small_world, virtue_profile(), config.knowledge_base)
    second = propose(graph, small_world, virtue_profile(), config.knowledge_base)
    assert first == second


def test_unknown_rule_reference_is_skipped(config, small_world, caplog):
    graph = RequirementGraph(nodes=[
        GoalNode(id="odd_goal", label="Odd Goal", domains=["virtue"], rules=["dragons"]),
    ])
    with caplog.at_level(logging.WARNING):
        proposals = propose(graph, small_world, virtue_profile(), config.knowledge_base)

    assert proposals
    assert "dragons" in caplog.text


def test_score_action_rejects_unaffordable(small_world):
    action = ActionProposal(id="palace", label="Build a Palace", costs={"gold": 5000})
    result = score_action(action, RequirementGraph(), small_world, virtue_profile())
    assert result.score == 0
    assert result.reasons == ["Cannot afford action costs"]


def test_domain_alignment_reads_text_when_undeclared():
    action = ActionProposal(id="courts", label="Hold Courts of Justice")
    assert action_domains(action) == ["virtue"]
    assert domain_alignment([], virtue_profile()) == 0.1


def test_diversify_covers_domains_first():
    strong_power = ActionProposal(id="a", label="A", domains=("power",), score=10.0)
    weaker_power = ActionProposal(id="b", label="B", domains=("power",), score=9.0)
    wealth = ActionProposal(id="c", label="C", domains=("wealth",), score=5.0)

    chosen = diversify([weaker_power, wealth, strong_power], limit=2)
    assert [p.id for p in chosen] == ["a", "c"]

    chosen = diversify([weaker_power, wealth, strong_power], limit=3)
    assert [p.id for p in chosen] == ["a", "b", "c"]
