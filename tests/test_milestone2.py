import pytest

from src.oracle.ambition.interpret import interpret, score_keywords, tokenize, word_hits
from src.oracle.ambition.model import DOMAINS, AmbitionProfile, normalize_domains, summarize_ambition
from src.oracle.core.content import ContentSchemaError, load_lexicon


def test_interpret_just_king(config):
    profile = interpret("I wish to be a just king who rules with wisdom", config.lexicon)

    assert profile.domains["power"] == pytest.approx(0.4)
    assert profile.domains["virtue"] == pytest.approx(0.4)
    assert profile.domains["creation"] == pytest.approx(0.2)
    assert profile.domains["wealth"] == 0
    assert profile.is_normalized()


def test_interpret_empty_text_is_balanced(config):
    profile = interpret("", config.lexicon)

    for domain in DOMAINS:
        assert profile.domains[domain] == pytest.approx(1 / 6)
    assert all(v == 0 for v in profile.modifiers.values())
    assert profile.scale == {"local": 0.2, "regional": 0.6, "world": 0.2}


def test_interpret_modifiers(config):
    profile = interpret("A peaceful and humble ruler", config.lexicon)

    assert profile.modifiers["peaceful"] == pytest.approx(0.34)
    assert profile.modifiers["ascetic"] == pytest.approx(0.34)
    assert profile.modifiers["ruthless"] == 0
    assert profile.domains["power"] == pytest.approx(1.0)


def test_interpret_phrases_count_double(config):
    profile = interpret("I will seize power with an iron fist", config.lexicon)

    assert profile.domains["power"] == pytest.approx(1.0)
    assert profile.modifiers["ruthless"] == pytest.approx(0.68)


def test_interpret_scale(config):
    profile = interpret("I will build an empire that spans the entire world", config.lexicon)
    assert profile.scale["world"] == pytest.approx(1.0)
    assert sum(profile.scale.values()) == pytest.approx(1.0)


def test_interpret_is_pure(config):
    text = "Bring peace and prosperity to every village"
    assert interpret(text, config.lexicon) == interpret(text, config.lexicon)


def test_word_hits_stems():
    assert word_hits("rules", "rule")
    assert word_hits("ruled", "rule")
    assert not word_hits("ruler", "ruling")
    # Short keywords only match exactly.
    assert not word_hits("goddess", "god")
    assert not word_hits("rulership", "rule")


def test_token_counts_once_per_list():
    tokens = tokenize("Wealthy wealthy merchant")
    # "wealthy" matches both "wealth" and "wealthy" but scores once per token.
    assert score_keywords(tokens, ["wealth", "wealthy", "merchant"]) == 3


def test_normalize_domains():
    weights = normalize_domains({"power": 2.0, "wealth": -1.0, "faith": 2.0})
    assert weights["power"] == pytest.approx(0.5)
    assert weights["wealth"] == 0
    assert sum(weights.values()) == pytest.approx(1.0)

    assert normalize_domains({}) == AmbitionProfile().domains


def test_summarize_ambition(config):
    profile = interpret("A ruthless conqueror who will rule the entire world", config.lexicon)
    summary = summarize_ambition(profile)
    assert summary.startswith("A global ambition focused on power")
    assert "ruthless" in summary


def test_load_lexicon_missing_section(tmp_path):
    invalid_yaml = """
domains:
  power: [rule]
modifiers:
  peaceful: [peace]
"""
    path = tmp_path / "lexicon.yaml"
    path.write_text(invalid_yaml)
    with pytest.raises(ContentSchemaError, match="Missing key 'scales'"):
        load_lexicon(path)


def test_load_lexicon_missing_domain(tmp_path):
    invalid_yaml = """
domains:
  power: [rule]
modifiers: {}
scales: {}
"""
    path = tmp_path / "lexicon.yaml"
    path.write_text(invalid_yaml)
    with pytest.raises(ContentSchemaError, match="Missing key 'wealth' in section 'domains'"):
        load_lexicon(path)
