from __future__ import annotations
import re
from typing import Dict, List, Sequence, TYPE_CHECKING

from .model import AmbitionProfile, DOMAINS, MODIFIERS, SCALES, balanced_domains

if TYPE_CHECKING:
    from ..core.content import Lexicon

TOKEN_PATTERN = re.compile(r"[a-z]+(?:-[a-z]+)?")

PHRASE_WEIGHT = 2
MODIFIER_PER_HIT = 0.34
# A keyword of at least this many letters also matches words that extend it
# by up to MAX_SUFFIX letters ("rule" matches "rules", "ruled").
STEM_MIN_LENGTH = 4
MAX_SUFFIX = 3
DEFAULT_SCALE = {"local": 0.2, "regional": 0.6, "world": 0.2}


def tokenize(text: str) -> List[str]:
    return TOKEN_PATTERN.findall((text or "").lower())


def word_hits(word: str, keyword: str) -> bool:
    if word == keyword:
        return True
    return (
        len(keyword) >= STEM_MIN_LENGTH
        and word.startswith(keyword)
        and len(word) - len(keyword) <= MAX_SUFFIX
    )


def _phrase_occurrences(tokens: Sequence[str], phrase: Sequence[str]) -> int:
    size = len(phrase)
    count = 0
    for start in range(len(tokens) - size + 1):
        if all(word_hits(tokens[start + i], phrase[i]) for i in range(size)):
            count += 1
    return count


def score_keywords(tokens: Sequence[str], keywords: Sequence[str]) -> float:
    """
    Counts keyword hits in a token stream.

    Each token scores at most once for the list, however many keywords it
    matches. Multi-word phrases score PHRASE_WEIGHT per occurrence.
    """
    words = [k for k in keywords if " " not in k]
    phrases = [k.split() for k in keywords if " " in k]

    hits = sum(1 for token in tokens if any(word_hits(token, k) for k in words))
    hits += PHRASE_WEIGHT * sum(_phrase_occurrences(tokens, p) for p in phrases)
    return float(hits)


def interpret(text: str, lexicon: Lexicon) -> AmbitionProfile:
    """
    Reads a free-text ambition into a weighted profile. Pure and deterministic.

    Text that hits no domain keyword falls back to an even 1/6 split.
    """
    tokens = tokenize(text)

    domain_hits = {d: score_keywords(tokens, lexicon.domains.get(d, [])) for d in DOMAINS}
    total = sum(domain_hits.values())
    if total > 0:
        domains = {d: domain_hits[d] / total for d in DOMAINS}
    else:
        domains = balanced_domains()

    modifiers = {
        m: min(1.0, score_keywords(tokens, lexicon.modifiers.get(m, [])) * MODIFIER_PER_HIT)
        for m in MODIFIERS
    }

    scale_hits: Dict[str, float] = {s: score_keywords(tokens, lexicon.scales.get(s, [])) for s in SCALES}
    scale_total = sum(scale_hits.values())
    if scale_total > 0:
        scale = {s: scale_hits[s] / scale_total for s in SCALES}
    else:
        scale = dict(DEFAULT_SCALE)

    return AmbitionProfile(domains=domains, modifiers=modifiers, scale=scale, raw_text=text or "")
