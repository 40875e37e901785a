"""
API Schemas — Request and Response Models

Pydantic models for the claimcheck API.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


# ============================================================
# VERIFY / EXTRACT
# ============================================================

class VerifyRequest(BaseModel):
    """POST /verify and POST /extract request body."""
    text: str = Field(..., min_length=1, max_length=50_000,
                      description="The text to check (1-50,000 characters).")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "Water freezes at 0 degrees Celsius. I think pizza is the best food."},
    ]}}


class ClaimResponse(BaseModel):
    id: str
    text: str
    original_text: str
    classification: str


class CitationResponse(BaseModel):
    source: str
    url: str
    snippet: str


class VerdictResponse(BaseModel):
    claim_id: str
    verdict: str
    confidence: float = Field(..., ge=0.1, le=0.9)
    explanation: str
    citations: list[CitationResponse] = []
    warnings: Optional[list[str]] = None
    confidence_explanation: Optional[str] = None


class VerifyResponse(BaseModel):
    """POST /verify response body."""
    claims: list[ClaimResponse]
    verdicts: list[VerdictResponse]
    error: Optional[str] = None


class ExtractResponse(BaseModel):
    """POST /extract response body."""
    claims: list[ClaimResponse]
    factual_count: int


# ============================================================
# HISTORY / THROTTLE
# ============================================================

class HistoryEntry(BaseModel):
    claim: ClaimResponse
    verdict: VerdictResponse
    timestamp: float
    queries: list[str]


class HistoryResponse(BaseModel):
    total: int
    entries: list[HistoryEntry]


class RateLimitResponse(BaseModel):
    remaining: int
    max_requests: int
    window_seconds: float
    retry_after_seconds: int


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    search_provider: str
    search_key_configured: bool
    cache_entries: int
