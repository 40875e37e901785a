"""
Evidence Aggregator

Turns raw search results for one claim into weighted, ranked evidence:

  1. Build one Evidence per result (stance + authority + display snippet)
  2. Rank by authority, newer first within a 0.1 authority band
  3. Partition by stance and compute the consensus score

    consensus = (Σ support authority − Σ contradict authority)
                / (Σ support authority + Σ contradict authority)

INCONCLUSIVE evidence counts toward total_sources but carries no weight.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Sequence

from claimcheck.authority import calculate_authority, extract_source_name
from claimcheck.models import (
    CONTRADICTS,
    SUPPORTS,
    AggregatedEvidence,
    Claim,
    Evidence,
)
from claimcheck.search import SearchResult
from claimcheck.stance import detect_stance

SNIPPET_LENGTH = 300
AUTHORITY_BAND = 0.1

_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def classify_evidence(claim: Claim, result: SearchResult) -> Evidence:
    """Judge one search result against one claim."""
    content = result.raw_content or result.content
    return Evidence(
        source=extract_source_name(result.url),
        url=result.url,
        snippet=result.content[:SNIPPET_LENGTH],
        stance=detect_stance(claim.text, content),
        authority=calculate_authority(result.url),
        raw_content=result.raw_content,
        published_date=result.published_date,
    )


def _compare(a: Evidence, b: Evidence) -> int:
    authority_diff = b.authority - a.authority
    if abs(authority_diff) > AUTHORITY_BAND:
        return 1 if authority_diff > 0 else -1

    a_date = a.published_at or _UNDATED
    b_date = b.published_at or _UNDATED
    if a_date == b_date:
        return 0
    return 1 if b_date > a_date else -1


def rank_evidence(evidence: Sequence[Evidence]) -> list[Evidence]:
    """Authority descending; recency (undated last) within a 0.1 band."""
    return sorted(evidence, key=cmp_to_key(_compare))


def calculate_consensus(
    supporting: Sequence[Evidence],
    contradicting: Sequence[Evidence],
) -> float:
    weighted_support = sum(e.authority for e in supporting)
    weighted_contradict = sum(e.authority for e in contradicting)
    total_weight = weighted_support + weighted_contradict
    if total_weight <= 0:
        return 0.0
    return (weighted_support - weighted_contradict) / total_weight


def aggregate_evidence(evidence: Sequence[Evidence]) -> AggregatedEvidence:
    """Partition evidence by stance and compute the consensus score."""
    supporting = [e for e in evidence if e.stance == SUPPORTS]
    contradicting = [e for e in evidence if e.stance == CONTRADICTS]
    inconclusive = [e for e in evidence if e.stance not in (SUPPORTS, CONTRADICTS)]

    return AggregatedEvidence(
        supporting=supporting,
        contradicting=contradicting,
        inconclusive=inconclusive,
        consensus_score=calculate_consensus(supporting, contradicting),
        total_sources=len(supporting) + len(contradicting) + len(inconclusive),
    )


def process_search_results(
    claim: Claim,
    results: Sequence[SearchResult],
) -> AggregatedEvidence:
    """classify → rank → aggregate."""
    evidence = [classify_evidence(claim, r) for r in results]
    return aggregate_evidence(rank_evidence(evidence))
