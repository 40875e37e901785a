"""
Verdict Engine — Aggregated Evidence → Verdict

Turns one claim's aggregated evidence into a label, a confidence, up
to three citations, an explanation and quality warnings.

Label (first match wins):
  total_sources < 2                                   → INSUFFICIENT_EVIDENCE
  no supporting and no contradicting evidence         → INSUFFICIENT_EVIDENCE
  consensus ≥ 0.6 and ≥2 supporting                   → SUPPORTED
  consensus ≤ -0.6 and ≥2 contradicting               → FALSE
  -0.6 ≤ consensus ≤ 0.3, both sides present          → MISLEADING
  otherwise                                           → INSUFFICIENT_EVIDENCE

Confidence:
  |consensus| + min(0.2, sources × 0.03) + min(0.15, high-authority × 0.05)
  × 0.7 for MISLEADING, clamped to [0.1, 0.9], rounded to 2 places.

No verdict is ever reported above 0.9.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from claimcheck.authority import get_hostname
from claimcheck.models import (
    FALSE,
    INSUFFICIENT_EVIDENCE,
    MISLEADING,
    SUPPORTED,
    AggregatedEvidence,
    Citation,
    Claim,
    Evidence,
    Verdict,
)

MIN_SOURCES_FOR_VERDICT = 2
SUPPORTED_THRESHOLD = 0.6
FALSE_THRESHOLD = -0.6
MISLEADING_RANGE = (-0.6, 0.3)
MAX_CONFIDENCE = 0.9
MIN_CONFIDENCE = 0.1
MISLEADING_PENALTY = 0.7
HIGH_AUTHORITY = 0.8
MAX_CITATIONS = 3

# Months are 30 days for recency checks
MONTH = timedelta(days=30)

WARNING_LOW_DIVERSITY = "Limited source diversity: Most sources are from similar domains."
WARNING_NO_HIGH_AUTHORITY = "No high-authority sources (e.g., .gov, major news) found."
WARNING_LOW_QUALITY = "Source quality is below average. Verify with additional sources."
WARNING_NOT_RECENT = "No recent sources found. Information may be outdated."

SHORT_LABELS = {
    SUPPORTED: "True",
    FALSE: "False",
    MISLEADING: "Misleading",
    INSUFFICIENT_EVIDENCE: "Unverified",
}


# ============================================================
# LABEL + CONFIDENCE
# ============================================================

def determine_verdict_label(evidence: AggregatedEvidence) -> str:
    supporting = evidence.supporting
    contradicting = evidence.contradicting
    consensus = evidence.consensus_score

    if evidence.total_sources < MIN_SOURCES_FOR_VERDICT:
        return INSUFFICIENT_EVIDENCE
    if not supporting and not contradicting:
        return INSUFFICIENT_EVIDENCE
    if consensus >= SUPPORTED_THRESHOLD and len(supporting) >= 2:
        return SUPPORTED
    if consensus <= FALSE_THRESHOLD and len(contradicting) >= 2:
        return FALSE

    low, high = MISLEADING_RANGE
    if low <= consensus <= high and supporting and contradicting:
        return MISLEADING
    return INSUFFICIENT_EVIDENCE


def calculate_confidence(evidence: AggregatedEvidence, verdict: str) -> float:
    if verdict == INSUFFICIENT_EVIDENCE:
        return MIN_CONFIDENCE

    confidence = abs(evidence.consensus_score)
    confidence += min(0.2, evidence.total_sources * 0.03)

    relevant = evidence.contradicting if verdict == FALSE else evidence.supporting
    high_authority = sum(1 for e in relevant if e.authority >= HIGH_AUTHORITY)
    confidence += min(0.15, high_authority * 0.05)

    if verdict == MISLEADING:
        confidence *= MISLEADING_PENALTY

    confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))
    return round(confidence, 2)


# ============================================================
# CITATIONS + EXPLANATION
# ============================================================

def _by_authority(evidence: Sequence[Evidence]) -> list[Evidence]:
    return sorted(evidence, key=lambda e: e.authority, reverse=True)


def select_citations(evidence: AggregatedEvidence, verdict: str) -> list[Citation]:
    """Top three sources for the verdict's polarity, highest authority first."""
    if verdict == SUPPORTED:
        relevant = evidence.supporting
    elif verdict == FALSE:
        relevant = evidence.contradicting
    elif verdict == MISLEADING:
        relevant = evidence.contradicting + evidence.supporting
    else:
        relevant = evidence.all_evidence

    return [
        Citation(source=e.source, url=e.url, snippet=e.snippet)
        for e in _by_authority(relevant)[:MAX_CITATIONS]
    ]


def confidence_level(confidence: float) -> str:
    if confidence >= 0.8:
        return "very likely"
    if confidence >= 0.6:
        return "likely"
    if confidence >= 0.4:
        return "possibly"
    return "tentatively"


def format_top_sources(evidence: Sequence[Evidence]) -> str:
    names = [e.source for e in _by_authority(evidence)[:2]]
    if not names:
        return "various sources"
    return " and ".join(names)


def _sources(count: int) -> str:
    return f"{count} source{'s' if count > 1 else ''}"


def generate_explanation(evidence: AggregatedEvidence, verdict: str, confidence: float) -> str:
    level = confidence_level(confidence)

    if verdict == SUPPORTED:
        return (
            f"This claim appears to be {level} supported. "
            f"{_sources(len(evidence.supporting))} confirm this claim, "
            f"including {format_top_sources(evidence.supporting)}."
        )
    if verdict == FALSE:
        return (
            f"This claim appears to be {level} false. "
            f"{_sources(len(evidence.contradicting))} contradict this claim, "
            f"including {format_top_sources(evidence.contradicting)}."
        )
    if verdict == MISLEADING:
        return (
            "This claim is misleading. While some elements may be accurate, "
            f"{_sources(len(evidence.contradicting))} identify significant issues. "
            "The claim lacks important context or contains inaccuracies."
        )

    total = evidence.total_sources
    if total == 0:
        return "Unable to verify this claim. No relevant sources were found."
    analyzed = f"{total} sources were" if total > 1 else f"{total} source was"
    return (
        "Unable to determine the accuracy of this claim with confidence. "
        f"{analyzed} analyzed, but the evidence is inconclusive or conflicting."
    )


# ============================================================
# QUALITY SIGNALS
# ============================================================

def _is_recent(evidence: Evidence, months: int, now: datetime) -> bool:
    published = evidence.published_at
    if published is None:
        return False
    return now - published < months * MONTH


def check_source_quality(
    evidence: AggregatedEvidence,
    now: Optional[datetime] = None,
) -> list[str]:
    """Independent quality warnings; every one that applies is returned."""
    items = evidence.all_evidence
    if not items:
        return []
    now = now or datetime.now(timezone.utc)
    warnings: list[str] = []

    hosts = {get_hostname(e.url) or e.source for e in items}
    if len(hosts) < 3 and len(items) >= 3:
        warnings.append(WARNING_LOW_DIVERSITY)

    if len(items) >= 2 and not any(e.authority >= HIGH_AUTHORITY for e in items):
        warnings.append(WARNING_NO_HIGH_AUTHORITY)

    if sum(e.authority for e in items) / len(items) < 0.4:
        warnings.append(WARNING_LOW_QUALITY)

    if len(items) >= 2 and not any(_is_recent(e, 12, now) for e in items):
        warnings.append(WARNING_NOT_RECENT)

    return warnings


def explain_confidence(
    evidence: AggregatedEvidence,
    verdict: str,
    confidence: float,
    now: Optional[datetime] = None,
) -> str:
    """Plain-language factors behind the confidence figure."""
    now = now or datetime.now(timezone.utc)
    items = evidence.all_evidence
    factors: list[str] = []

    if evidence.total_sources >= 5:
        factors.append("multiple sources analyzed")
    elif evidence.total_sources <= 2:
        factors.append("limited sources available")

    strength = abs(evidence.consensus_score)
    if strength >= 0.8:
        factors.append("strong consensus among sources")
    elif strength <= 0.3:
        factors.append("mixed or weak consensus")

    high_authority = sum(1 for e in items if e.authority >= HIGH_AUTHORITY)
    if high_authority >= 2:
        factors.append("includes high-authority sources")
    elif high_authority == 0 and items:
        factors.append("no high-authority sources")

    if sum(1 for e in items if _is_recent(e, 6, now)) >= 2:
        factors.append("recent sources")

    if verdict == MISLEADING:
        factors.append("claim contains both accurate and inaccurate elements")

    percent = round(confidence * 100)
    if not factors:
        return f"Confidence of {percent}% based on available evidence."
    return f"Confidence of {percent}%: {', '.join(factors)}."


# ============================================================
# ENTRY POINT
# ============================================================

def generate_verdict(
    claim: Claim,
    evidence: AggregatedEvidence,
    now: Optional[datetime] = None,
) -> Verdict:
    """Build the terminal verdict for one claim."""
    label = determine_verdict_label(evidence)
    confidence = calculate_confidence(evidence, label)
    warnings = check_source_quality(evidence, now=now)

    return Verdict(
        claim_id=claim.id,
        verdict=label,
        confidence=confidence,
        explanation=generate_explanation(evidence, label, confidence),
        citations=select_citations(evidence, label),
        warnings=warnings or None,
        confidence_explanation=explain_confidence(evidence, label, confidence, now=now),
    )


def placeholder_verdict(claim: Claim, explanation: str) -> Verdict:
    """INSUFFICIENT_EVIDENCE verdict for a claim that could not be searched."""
    return Verdict(
        claim_id=claim.id,
        verdict=INSUFFICIENT_EVIDENCE,
        confidence=MIN_CONFIDENCE,
        explanation=explanation,
    )


def short_label(verdict: str) -> str:
    """Display label: True, False, Misleading or Unverified."""
    return SHORT_LABELS.get(verdict, "Unverified")
