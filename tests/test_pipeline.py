"""
Tests for the verification pipeline — orchestration, failure
isolation, throttling, caching.

Uses a fake search provider. No network calls.
"""

import asyncio
import logging

import pytest

from claimcheck.cache import VerdictCache
from claimcheck.config import Settings
from claimcheck.models import FACTUAL, INSUFFICIENT_EVIDENCE, OPINION, SUPPORTED
from claimcheck.pipeline import (
    AUTH_ERROR,
    NO_CLAIMS_ERROR,
    NO_FACTUAL_CLAIMS_ERROR,
    SEARCH_FAILED,
    AllVariantsFailedError,
    Verifier,
    verify_text,
)
from claimcheck.rate_limit import SlidingWindowLimiter
from claimcheck.search import SearchAuthError, SearchError, SearchProvider, SearchResult

WATER = "Water freezes at 0 degrees Celsius."
WATER_CONTENT = "Water freezes at 0 degrees Celsius at sea level, scientists have confirmed."

USGS = SearchResult(url="https://www.usgs.gov/water", content=WATER_CONTENT)
NYT = SearchResult(url="https://www.nytimes.com/science/water", content=WATER_CONTENT)
CNN = SearchResult(url="https://www.cnn.com/science/water", content=WATER_CONTENT)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeSearch(SearchProvider):
    """Canned search provider that records every query."""

    name = "fake"

    def __init__(self, results=(), by_query=None, fail=None, fail_all=None):
        self.results = list(results)
        self.by_query = by_query or {}
        self.fail = fail or {}
        self.fail_all = fail_all
        self.queries: list[str] = []
        self.closed = False

    async def search(self, query, depth="advanced", include_raw_content=True, max_results=6):
        self.queries.append(query)
        if self.fail_all is not None:
            raise self.fail_all
        if query in self.fail:
            raise self.fail[query]
        return list(self.by_query.get(query, self.results))

    async def aclose(self):
        self.closed = True


class SlowSearch(FakeSearch):
    """Yields to the event loop before answering, like a real HTTP call."""

    async def search(self, query, depth="advanced", include_raw_content=True, max_results=6):
        await asyncio.sleep(0.05)
        return await super().search(query, depth, include_raw_content, max_results)


def _verifier(provider: FakeSearch, max_requests: int = 10) -> Verifier:
    return Verifier(
        provider,
        limiter=SlidingWindowLimiter(max_requests=max_requests, window_seconds=60, clock=FakeClock()),
        cache=VerdictCache(),
    )


# ============================================================
# EXTRACTION OUTCOMES
# ============================================================

class TestNoSearch:

    @pytest.mark.asyncio
    async def test_opinion_only(self):
        """Scenario C: opinions are returned but never searched."""
        search = FakeSearch([USGS])
        result = await _verifier(search).verify("I think pizza is the best food.")

        assert result.error == NO_FACTUAL_CLAIMS_ERROR
        assert [c.classification for c in result.claims] == [OPINION]
        assert result.verdicts == []
        assert search.queries == []

    @pytest.mark.asyncio
    async def test_no_claims(self):
        search = FakeSearch([USGS])
        result = await _verifier(search).verify("Yes. No. Maybe.")

        assert result.error == NO_CLAIMS_ERROR
        assert result.claims == []
        assert search.queries == []

    def test_extract_does_not_search(self):
        search = FakeSearch([USGS])
        claims = _verifier(search).extract(f"{WATER} I think pizza is the best food.")
        assert [c.classification for c in claims] == [FACTUAL, OPINION]
        assert search.queries == []


# ============================================================
# HAPPY PATH
# ============================================================

class TestVerify:

    @pytest.mark.asyncio
    async def test_supported(self):
        search = FakeSearch([USGS, NYT, CNN])
        verifier = _verifier(search)
        result = await verifier.verify(WATER)

        assert result.error is None
        assert len(result.claims) == 1
        verdict = result.verdicts[0]
        assert verdict.claim_id == result.claims[0].id
        assert verdict.verdict == SUPPORTED
        assert verdict.confidence == 0.9
        assert [c.url for c in verdict.citations] == [USGS.url, NYT.url, CNN.url]

        assert search.queries == [
            WATER,
            "fact check: Water freezes at 0 degrees Celsius",
            "debunked: Water freezes at 0 degrees Celsius",
        ]
        # One throttle slot per claim, not per query variant
        assert verifier.limiter.remaining() == 9

    @pytest.mark.asyncio
    async def test_one_verdict_per_factual_claim(self):
        search = FakeSearch([USGS, NYT, CNN])
        result = await _verifier(search).verify(
            f"{WATER} I think pizza is the best food. Paris is the capital of France."
        )
        factual_ids = [c.id for c in result.claims if c.classification == FACTUAL]
        assert [v.claim_id for v in result.verdicts] == factual_ids
        assert len(factual_ids) == 2

    @pytest.mark.asyncio
    async def test_results_unioned_by_url(self):
        search = FakeSearch(by_query={
            WATER: [USGS, NYT],
            "fact check: Water freezes at 0 degrees Celsius": [NYT, CNN],
            "debunked: Water freezes at 0 degrees Celsius": [USGS],
        })
        verifier = _verifier(search)
        claim = verifier.extract(WATER)[0]

        results = await verifier.search_for_evidence(claim, list(search.by_query))
        assert [r.url for r in results] == [USGS.url, NYT.url, CNN.url]

    @pytest.mark.asyncio
    async def test_logs_verification(self, caplog):
        caplog.set_level(logging.INFO, logger="claimcheck")
        await _verifier(FakeSearch([USGS, NYT, CNN])).verify(WATER)

        records = [r for r in caplog.records if r.getMessage() == "Claim verified"]
        assert len(records) == 1
        assert records[0].verdict == SUPPORTED
        assert records[0].sources_count == 3
        assert records[0].cache_hit is False


# ============================================================
# FAILURE ISOLATION
# ============================================================

class TestSearchFailures:

    @pytest.mark.asyncio
    async def test_failed_variant_is_dropped(self, caplog):
        caplog.set_level(logging.WARNING, logger="claimcheck")
        search = FakeSearch(
            [USGS, NYT, CNN],
            fail={"fact check: Water freezes at 0 degrees Celsius": SearchError("timeout")},
        )
        verifier = _verifier(search)
        result = await verifier.verify(WATER)

        assert result.verdicts[0].verdict == SUPPORTED
        assert verifier.limiter.remaining() == 9
        assert any(r.getMessage() == "Search failed for query variant" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_all_variants_failed(self):
        search = FakeSearch(fail_all=SearchError("provider down", status_code=503))
        verifier = _verifier(search)
        result = await verifier.verify(WATER)

        verdict = result.verdicts[0]
        assert verdict.verdict == INSUFFICIENT_EVIDENCE
        assert verdict.confidence == 0.1
        assert verdict.explanation == SEARCH_FAILED
        assert result.error is None
        # Nothing reached the provider successfully, so no slot was used
        assert verifier.limiter.remaining() == 10

    @pytest.mark.asyncio
    async def test_all_variants_failed_is_per_claim(self):
        water_queries = [
            WATER,
            "fact check: Water freezes at 0 degrees Celsius",
            "debunked: Water freezes at 0 degrees Celsius",
        ]
        search = FakeSearch(
            [USGS, NYT, CNN],
            fail={q: SearchError("boom") for q in water_queries},
        )
        result = await _verifier(search).verify(f"{WATER} Paris is the capital of France.")

        assert result.verdicts[0].explanation == SEARCH_FAILED
        assert result.verdicts[1].explanation != SEARCH_FAILED
        assert len(search.queries) == 6

    @pytest.mark.asyncio
    async def test_search_for_evidence_raises(self):
        search = FakeSearch(fail_all=SearchError("down"))
        verifier = _verifier(search)
        claim = verifier.extract(WATER)[0]
        with pytest.raises(AllVariantsFailedError):
            await verifier.search_for_evidence(claim, [WATER, "fact check: water"])

    @pytest.mark.asyncio
    async def test_auth_failure_aborts_run(self):
        search = FakeSearch(fail_all=SearchAuthError("bad key", status_code=401))
        result = await _verifier(search).verify(f"{WATER} Paris is the capital of France.")

        assert result.error == AUTH_ERROR
        assert len(result.verdicts) == 2
        assert all(v.verdict == INSUFFICIENT_EVIDENCE for v in result.verdicts)
        assert all(v.explanation == AUTH_ERROR for v in result.verdicts)
        # Only the first claim's variants were attempted
        assert len(search.queries) == 3


# ============================================================
# THROTTLE + CACHE
# ============================================================

class TestThrottle:

    @pytest.mark.asyncio
    async def test_exhaustion_aborts_remaining_claims(self):
        search = FakeSearch([USGS, NYT, CNN])
        verifier = _verifier(search, max_requests=1)
        result = await verifier.verify(
            f"{WATER} Paris is the capital of France. The company was founded in 1998."
        )

        assert result.error is None
        assert len(result.verdicts) == 3
        assert result.verdicts[0].verdict == SUPPORTED
        for verdict in result.verdicts[1:]:
            assert verdict.verdict == INSUFFICIENT_EVIDENCE
            assert verdict.confidence == 0.1
            assert verdict.explanation == (
                "Rate limited. Please wait 60 seconds before trying again."
            )
        assert len(search.queries) == 3

    @pytest.mark.asyncio
    async def test_concurrent_runs_share_the_last_slot(self):
        search = SlowSearch([USGS, NYT, CNN])
        verifier = _verifier(search, max_requests=1)

        first, second = await asyncio.gather(
            verifier.verify(WATER),
            verifier.verify("Paris is the capital of France."),
        )

        explanations = [first.verdicts[0].explanation, second.verdicts[0].explanation]
        assert sum(e.startswith("Rate limited.") for e in explanations) == 1
        # Only one claim's variants reached the provider
        assert len(search.queries) == 3
        assert verifier.limiter.remaining() == 0

    @pytest.mark.asyncio
    async def test_failed_claim_frees_its_slot(self):
        water_queries = [
            WATER,
            "fact check: Water freezes at 0 degrees Celsius",
            "debunked: Water freezes at 0 degrees Celsius",
        ]
        search = FakeSearch(
            [USGS, NYT, CNN],
            fail={q: SearchError("boom") for q in water_queries},
        )
        verifier = _verifier(search, max_requests=1)
        result = await verifier.verify(f"{WATER} Paris is the capital of France.")

        assert result.verdicts[0].explanation == SEARCH_FAILED
        assert not result.verdicts[1].explanation.startswith("Rate limited.")
        assert len(search.queries) == 6
        assert verifier.limiter.remaining() == 0


class TestCacheReuse:

    @pytest.mark.asyncio
    async def test_repeat_claim_served_from_cache(self):
        search = FakeSearch([USGS, NYT, CNN])
        verifier = _verifier(search)

        first = await verifier.verify(WATER)
        second = await verifier.verify(WATER)

        assert len(search.queries) == 3
        assert verifier.limiter.remaining() == 9
        assert second.verdicts[0].verdict == first.verdicts[0].verdict
        assert second.verdicts[0].claim_id == second.claims[0].id
        assert verifier.cache.stats["hits"] == 1

    @pytest.mark.asyncio
    async def test_cache_hit_ignores_throttle(self):
        search = FakeSearch([USGS, NYT, CNN])
        verifier = _verifier(search, max_requests=1)
        await verifier.verify(WATER)

        result = await verifier.verify(WATER)
        assert result.verdicts[0].verdict == SUPPORTED


# ============================================================
# WIRING
# ============================================================

class TestWiring:

    def test_from_settings(self):
        custom = Settings(
            RATE_MAX_REQUESTS=4,
            RATE_WINDOW_SECONDS=30,
            CACHE_MAX_ENTRIES=7,
            SEARCH_DEPTH="basic",
            MAX_RESULTS=3,
        )
        search = FakeSearch()
        verifier = Verifier.from_settings(custom, provider=search)

        assert verifier.provider is search
        assert verifier.limiter.max_requests == 4
        assert verifier.limiter.window_seconds == 30
        assert verifier.search_depth == "basic"
        assert verifier.max_results == 3

    def test_unknown_search_depth_rejected(self):
        with pytest.raises(ValueError, match="CLAIMCHECK_SEARCH_DEPTH"):
            Settings(SEARCH_DEPTH="deep")

    @pytest.mark.asyncio
    async def test_verify_text_with_verifier(self):
        search = FakeSearch([USGS, NYT, CNN])
        result = await verify_text(WATER, verifier=_verifier(search))
        assert result.verdicts[0].verdict == SUPPORTED

    @pytest.mark.asyncio
    async def test_aclose_closes_provider(self):
        search = FakeSearch()
        await _verifier(search).aclose()
        assert search.closed

    @pytest.mark.asyncio
    async def test_result_serializes(self):
        result = await _verifier(FakeSearch([USGS, NYT, CNN])).verify(WATER)
        data = result.to_dict()
        assert set(data) == {"claims", "verdicts", "error"}
        assert data["verdicts"][0]["citations"][0]["url"] == USGS.url
