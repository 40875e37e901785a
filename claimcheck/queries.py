"""
Query Synthesizer

Builds up to three search queries per claim to limit confirmation bias:

  1. Neutral:    the claim as stated
  2. Fact-check: the claim framed for fact-check articles
  3. Negated:    the claim with a negation after the first copula or
                 auxiliary, or a "debunked:" framing when there is none
"""

from __future__ import annotations

import re
from typing import Optional

from claimcheck.models import Claim

MAX_QUERIES = 3

_NEGATABLE_VERBS = [
    re.compile(r"\b(is|are|was|were)\b", re.IGNORECASE),
    re.compile(r"\b(has|have|had)\b", re.IGNORECASE),
]
_TRAILING_PERIOD = re.compile(r"\.$")


def _strip_period(text: str) -> str:
    return _TRAILING_PERIOD.sub("", text)


def negate_claim(text: str) -> Optional[str]:
    """
    Insert "not" after the first copula or auxiliary verb.

    "The Earth is round" → "The Earth is not round"
    Returns None when no negatable verb exists.
    """
    for verb in _NEGATABLE_VERBS:
        negated, count = verb.subn(lambda m: f"{m.group(1)} not", text, count=1)
        if count:
            return negated
    return None


def generate_search_queries(claim: Claim) -> list[str]:
    """Neutral, fact-check framed and negated variants of the claim."""
    queries = [
        claim.text,
        f"fact check: {_strip_period(claim.text)}",
    ]
    negated = negate_claim(claim.text)
    queries.append(negated or f"debunked: {_strip_period(claim.text)}")
    return queries[:MAX_QUERIES]
