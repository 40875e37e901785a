"""
claimcheck — Claim Extraction and Evidence-Based Verification

Splits text into atomic claims, classifies them, and verifies the
factual ones against web search evidence weighted by source authority.

Public API:
  - extract_claims:         Segment + classify + neutralize (no I/O)
  - generate_search_queries: Neutral, fact-check and negated variants
  - calculate_authority:    Domain credibility weight in [0, 1]
  - detect_stance:          SUPPORTS / CONTRADICTS / INCONCLUSIVE per source
  - process_search_results: Evidence construction, ranking, aggregation
  - generate_verdict:       Label, confidence, citations, explanation
  - Verifier / verify_text: The full pipeline against a SearchProvider

Usage:
    from claimcheck import Verifier
    from claimcheck.search.factory import get_provider

    verifier = Verifier(get_provider("tavily"))
    result = await verifier.verify("The Eiffel Tower is in Paris.")
"""

__version__ = "0.3.0"

from claimcheck.models import (
    Claim,
    Evidence,
    AggregatedEvidence,
    Citation,
    Verdict,
    VerificationResult,
)
from claimcheck.extractor import extract_claims, get_factual_claims, classify_claim
from claimcheck.queries import generate_search_queries
from claimcheck.authority import calculate_authority, extract_source_name
from claimcheck.stance import detect_stance
from claimcheck.aggregator import aggregate_evidence, process_search_results
from claimcheck.verdict import generate_verdict, short_label
from claimcheck.rate_limit import SlidingWindowLimiter, RateLimitError
from claimcheck.cache import VerdictCache
from claimcheck.search import SearchProvider, SearchResult, SearchError, SearchAuthError
from claimcheck.pipeline import Verifier, verify_text

__all__ = [
    "Claim",
    "Evidence",
    "AggregatedEvidence",
    "Citation",
    "Verdict",
    "VerificationResult",
    "extract_claims",
    "get_factual_claims",
    "classify_claim",
    "generate_search_queries",
    "calculate_authority",
    "extract_source_name",
    "detect_stance",
    "aggregate_evidence",
    "process_search_results",
    "generate_verdict",
    "short_label",
    "SlidingWindowLimiter",
    "RateLimitError",
    "VerdictCache",
    "SearchProvider",
    "SearchResult",
    "SearchError",
    "SearchAuthError",
    "Verifier",
    "verify_text",
]
