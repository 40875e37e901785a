"""
Tests for search query synthesis.
"""

from claimcheck.models import FACTUAL, Claim
from claimcheck.queries import MAX_QUERIES, generate_search_queries, negate_claim


def _claim(text: str) -> Claim:
    return Claim(id="claim_1_abcdefg", text=text, original_text=text, classification=FACTUAL)


class TestNegation:

    def test_negates_copula(self):
        assert negate_claim("The Earth is round.") == "The Earth is not round."

    def test_negates_only_first_copula(self):
        assert negate_claim("The sky is blue and grass is green.") == (
            "The sky is not blue and grass is green."
        )

    def test_copula_beats_auxiliary(self):
        assert negate_claim("She has said the report was wrong.") == (
            "She has said the report was not wrong."
        )

    def test_negates_auxiliary(self):
        assert negate_claim("She has two cats.") == "She has not two cats."

    def test_word_boundaries(self):
        # "is" inside "This" and "island" is not a verb
        assert negate_claim("This island was volcanic.") == "This island was not volcanic."

    def test_no_negatable_verb(self):
        assert negate_claim("Biden won the election.") is None


class TestGenerateQueries:

    def test_three_variants(self):
        queries = generate_search_queries(_claim("The Earth is round."))
        assert queries == [
            "The Earth is round.",
            "fact check: The Earth is round",
            "The Earth is not round.",
        ]

    def test_debunked_fallback(self):
        queries = generate_search_queries(_claim("Biden won the election."))
        assert queries[2] == "debunked: Biden won the election"

    def test_never_more_than_max(self):
        queries = generate_search_queries(_claim("Water freezes at 0 degrees Celsius."))
        assert len(queries) <= MAX_QUERIES
