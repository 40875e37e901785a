"""
Data Model — Claims, Evidence, Verdicts

Plain dataclasses shared by every stage of the pipeline:

    text → Claim → Evidence → AggregatedEvidence → Verdict

Claims and verdicts are created once and never mutated. Evidence
belongs to the aggregation that produced it and is never shared
across claims.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


# ============================================================
# LABELS
# ============================================================

# Claim classification
FACTUAL = "FACTUAL"
OPINION = "OPINION"
PREDICTION = "PREDICTION"
AMBIGUOUS = "AMBIGUOUS"
CLASSIFICATIONS = (FACTUAL, OPINION, PREDICTION, AMBIGUOUS)

# Evidence stance
SUPPORTS = "SUPPORTS"
CONTRADICTS = "CONTRADICTS"
INCONCLUSIVE = "INCONCLUSIVE"
STANCES = (SUPPORTS, CONTRADICTS, INCONCLUSIVE)

# Verdict label
SUPPORTED = "SUPPORTED"
FALSE = "FALSE"
MISLEADING = "MISLEADING"
INSUFFICIENT_EVIDENCE = "INSUFFICIENT_EVIDENCE"
VERDICT_LABELS = (SUPPORTED, FALSE, MISLEADING, INSUFFICIENT_EVIDENCE)


# ============================================================
# CLAIMS
# ============================================================

@dataclass(frozen=True)
class Claim:
    """An atomic claim extracted from input text."""
    id: str
    text: str                 # Neutralized text, used for searching
    original_text: str        # As written by the author
    classification: str       # One of CLASSIFICATIONS

    @property
    def is_factual(self) -> bool:
        return self.classification == FACTUAL

    def to_dict(self) -> dict:
        return asdict(self)


# ============================================================
# EVIDENCE
# ============================================================

@dataclass
class Evidence:
    """One search result judged against one claim."""
    source: str
    url: str
    snippet: str
    stance: str               # One of STANCES
    authority: float
    raw_content: Optional[str] = None
    published_date: Optional[str] = None

    @property
    def published_at(self) -> Optional[datetime]:
        """Parsed publish date (UTC), or None when absent or unparseable."""
        return parse_date(self.published_date)


@dataclass
class AggregatedEvidence:
    """Evidence for one claim, partitioned by stance."""
    supporting: list[Evidence] = field(default_factory=list)
    contradicting: list[Evidence] = field(default_factory=list)
    inconclusive: list[Evidence] = field(default_factory=list)
    consensus_score: float = 0.0   # -1 (all contradict) .. +1 (all support)
    total_sources: int = 0

    @property
    def all_evidence(self) -> list[Evidence]:
        return self.supporting + self.contradicting + self.inconclusive


# ============================================================
# VERDICTS
# ============================================================

@dataclass(frozen=True)
class Citation:
    source: str
    url: str
    snippet: str


@dataclass(frozen=True)
class Verdict:
    """Terminal verdict for one factual claim."""
    claim_id: str
    verdict: str              # One of VERDICT_LABELS
    confidence: float
    explanation: str
    citations: list[Citation] = field(default_factory=list)
    warnings: Optional[list[str]] = None
    confidence_explanation: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VerificationResult:
    """Output of one verification run."""
    claims: list[Claim] = field(default_factory=list)
    verdicts: list[Verdict] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "claims": [c.to_dict() for c in self.claims],
            "verdicts": [v.to_dict() for v in self.verdicts],
            "error": self.error,
        }


# ============================================================
# HELPERS
# ============================================================

def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 or RFC 2822 date strings into aware UTC datetimes."""
    if not value:
        return None
    text = value.strip()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
