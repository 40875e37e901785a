"""
Pipeline — Verification Orchestrator

    text → claims → (factual only) → queries → search → evidence → verdict

The Verifier owns the only mutable state in a run: its search
provider, its sliding-window limiter and its verdict cache. Claims
are processed one at a time; the query variants for one claim are
searched concurrently and unioned by URL.

Failure handling:
  - a failed query variant is dropped; sibling variants still count
  - throttle exhaustion aborts the remaining claims with placeholders
  - provider auth failure aborts the remaining claims and sets the
    run-level error
  - no claim ever fails harder than INSUFFICIENT_EVIDENCE
"""

from __future__ import annotations

import asyncio
import dataclasses
import time
from typing import Optional

from claimcheck.aggregator import process_search_results
from claimcheck.cache import VerdictCache
from claimcheck.extractor import extract_claims, get_factual_claims
from claimcheck.logging import get_logger
from claimcheck.models import Claim, Verdict, VerificationResult
from claimcheck.queries import generate_search_queries
from claimcheck.rate_limit import RateLimitError, SlidingWindowLimiter
from claimcheck.search import SearchAuthError, SearchProvider, SearchResult
from claimcheck.verdict import generate_verdict, placeholder_verdict

logger = get_logger("pipeline")

NO_CLAIMS_ERROR = "No verifiable claims found in the text."
NO_FACTUAL_CLAIMS_ERROR = (
    "No factual claims to verify. All extracted claims are opinions, "
    "predictions, or ambiguous."
)
AUTH_ERROR = "Search provider authentication failed. Check the TAVILY_API_KEY setting."
SEARCH_FAILED = "Search failed. Please try again later."


def rate_limited_explanation(wait_seconds: int) -> str:
    return f"Rate limited. Please wait {wait_seconds} seconds before trying again."


class AllVariantsFailedError(Exception):
    """Every query variant for a claim failed."""


class Verifier:
    """Runs the verification pipeline against one search provider."""

    def __init__(
        self,
        provider: SearchProvider,
        limiter: Optional[SlidingWindowLimiter] = None,
        cache: Optional[VerdictCache] = None,
        search_depth: str = "advanced",
        max_results: int = 6,
    ):
        self.provider = provider
        self.limiter = limiter or SlidingWindowLimiter()
        self.cache = cache or VerdictCache()
        self.search_depth = search_depth
        self.max_results = max_results

    @classmethod
    def from_settings(cls, settings, provider: Optional[SearchProvider] = None) -> "Verifier":
        """Build a Verifier wired from a Settings instance."""
        if provider is None:
            from claimcheck.search.factory import get_provider
            provider = get_provider(
                settings.SEARCH_PROVIDER,
                api_key=settings.TAVILY_API_KEY,
                timeout=settings.SEARCH_TIMEOUT,
            )
        return cls(
            provider=provider,
            limiter=SlidingWindowLimiter(
                max_requests=settings.RATE_MAX_REQUESTS,
                window_seconds=settings.RATE_WINDOW_SECONDS,
            ),
            cache=VerdictCache(
                ttl_seconds=settings.CACHE_TTL_SECONDS,
                max_entries=settings.CACHE_MAX_ENTRIES,
            ),
            search_depth=settings.SEARCH_DEPTH,
            max_results=settings.MAX_RESULTS,
        )

    # ------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------

    async def _search_variant(self, query: str) -> list[SearchResult]:
        return await self.provider.search(
            query,
            depth=self.search_depth,
            include_raw_content=True,
            max_results=self.max_results,
        )

    async def search_for_evidence(self, claim: Claim, queries: list[str]) -> list[SearchResult]:
        """
        Search every query variant concurrently and union the results
        by URL, in variant order.

        A failed variant is logged and dropped. SearchAuthError is
        re-raised; AllVariantsFailedError if nothing succeeded.
        """
        outcomes = await asyncio.gather(
            *(self._search_variant(q) for q in queries),
            return_exceptions=True,
        )

        results: list[SearchResult] = []
        seen_urls: set[str] = set()
        succeeded = 0
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, SearchAuthError):
                raise outcome
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(
                    "Search failed for query variant",
                    extra={
                        "claim_id": claim.id,
                        "query": query,
                        "error": str(outcome),
                        "error_type": type(outcome).__name__,
                    },
                )
                continue

            succeeded += 1
            for result in outcome:
                if result.url not in seen_urls:
                    seen_urls.add(result.url)
                    results.append(result)

        if queries and succeeded == 0:
            raise AllVariantsFailedError(f"All {len(queries)} query variants failed")
        return results

    # ------------------------------------------------------------
    # VERIFICATION
    # ------------------------------------------------------------

    async def verify_claim(self, claim: Claim) -> Verdict:
        """
        Verify one factual claim.

        Raises RateLimitError, SearchAuthError or AllVariantsFailedError;
        verify() turns those into placeholder verdicts.
        """
        cached = await self.cache.lookup(claim.text)
        if cached is not None:
            logger.info(
                "Verdict served from cache",
                extra={"claim_id": claim.id, "verdict": cached.verdict.verdict, "cache_hit": True},
            )
            return dataclasses.replace(cached.verdict, claim_id=claim.id)

        # Reserved before the await so concurrent verify() calls cannot
        # both see the last free slot
        slot = self.limiter.acquire()

        start = time.perf_counter()
        queries = generate_search_queries(claim)
        try:
            results = await self.search_for_evidence(claim, queries)
        except Exception:
            # Nothing came back, so the slot is not spent
            self.limiter.release(slot)
            raise

        evidence = process_search_results(claim, results)
        verdict = generate_verdict(claim, evidence)
        await self.cache.store(claim, verdict, queries)

        logger.info(
            "Claim verified",
            extra={
                "claim_id": claim.id,
                "verdict": verdict.verdict,
                "confidence": verdict.confidence,
                "sources_count": evidence.total_sources,
                "queries_count": len(queries),
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
                "cache_hit": False,
            },
        )
        return verdict

    async def verify(self, text: str) -> VerificationResult:
        """Extract claims from text and verify the factual ones."""
        claims = self.extract(text)
        if not claims:
            return VerificationResult(error=NO_CLAIMS_ERROR)

        factual = get_factual_claims(claims)
        logger.info(
            "Claims extracted: %d total, %d factual", len(claims), len(factual),
        )
        if not factual:
            return VerificationResult(claims=claims, error=NO_FACTUAL_CLAIMS_ERROR)

        result = VerificationResult(claims=claims)
        abort_reason: Optional[str] = None

        for claim in factual:
            if abort_reason is not None:
                result.verdicts.append(placeholder_verdict(claim, abort_reason))
                continue

            try:
                verdict = await self.verify_claim(claim)
            except RateLimitError as e:
                logger.warning(
                    "Rate limited, skipping remaining claims",
                    extra={"claim_id": claim.id, "wait_seconds": e.wait_seconds},
                )
                abort_reason = rate_limited_explanation(e.wait_seconds)
                verdict = placeholder_verdict(claim, abort_reason)
            except SearchAuthError as e:
                logger.error(
                    "Search provider rejected credentials",
                    extra={"claim_id": claim.id, "status_code": e.status_code, "error": str(e)},
                )
                abort_reason = AUTH_ERROR
                result.error = AUTH_ERROR
                verdict = placeholder_verdict(claim, abort_reason)
            except AllVariantsFailedError as e:
                logger.warning(
                    "No query variant succeeded",
                    extra={"claim_id": claim.id, "error": str(e)},
                )
                verdict = placeholder_verdict(claim, SEARCH_FAILED)

            result.verdicts.append(verdict)

        return result

    def extract(self, text: str) -> list[Claim]:
        """Segmentation and classification only. No search."""
        return extract_claims(text)

    async def aclose(self) -> None:
        await self.provider.aclose()


async def verify_text(text: str, verifier: Optional[Verifier] = None) -> VerificationResult:
    """
    Convenience entry point: verify text with a Verifier built from
    settings unless one is supplied.
    """
    if verifier is not None:
        return await verifier.verify(text)

    from claimcheck.config import settings
    verifier = Verifier.from_settings(settings)
    try:
        return await verifier.verify(text)
    finally:
        await verifier.aclose()
