"""
Tests for source authority scoring and display names.
"""

import pytest

from claimcheck.authority import (
    GENERIC_TLD_SCORE,
    LOW_AUTHORITY_SCORE,
    MALFORMED_URL_SCORE,
    UNKNOWN_DOMAIN_SCORE,
    calculate_authority,
    domain_matches,
    extract_source_name,
)


class TestAuthorityTiers:

    @pytest.mark.parametrize("url,expected", [
        ("https://www.cdc.gov/flu/index.html", 0.95),
        ("https://www.snopes.com/fact-check/x", 0.95),
        ("https://apnews.com/article/x", 0.95),
        ("https://www.nytimes.com/2024/01/01/x.html", 0.85),
        ("https://www.bbc.co.uk/news/x", 0.85),
        ("https://edition.cnn.com/x", 0.75),
        ("https://en.wikipedia.org/wiki/Paris", 0.70),
        ("https://www.britannica.com/place/Paris", 0.70),
    ])
    def test_tiers(self, url, expected):
        assert calculate_authority(url) == expected

    def test_suffix_domains_match_country_variants(self):
        assert calculate_authority("https://www.data.gov.uk/dataset") == 0.95

    def test_tier_order_is_priority(self):
        # data.gov is listed as a reference, but .gov is matched first
        assert calculate_authority("https://data.gov/") == 0.95

    def test_case_insensitive(self):
        assert calculate_authority("https://WWW.REUTERS.COM/world") == 0.95


class TestLowAuthority:

    @pytest.mark.parametrize("url", [
        "https://twitter.com/user/status/1",
        "https://x.com/user/status/1",
        "https://mobile.twitter.com/user",
        "https://www.youtube.com/watch?v=abc",
        "https://someone.medium.com/post",
        "https://www.dailymail.co.uk/news",
    ])
    def test_deny_list(self, url):
        assert calculate_authority(url) == LOW_AUTHORITY_SCORE

    def test_label_boundaries(self):
        # "netflix.com" must not match the "x.com" entry
        assert calculate_authority("https://www.netflix.com/") == GENERIC_TLD_SCORE


class TestFallbacks:

    def test_generic_tld(self):
        assert calculate_authority("https://some-blog.com/post") == GENERIC_TLD_SCORE
        assert calculate_authority("https://startup.io/") == GENERIC_TLD_SCORE

    def test_unknown_domain(self):
        assert calculate_authority("https://zeitung.de/artikel") == UNKNOWN_DOMAIN_SCORE

    @pytest.mark.parametrize("url", ["not a url", "", "http://", "http://[invalid"])
    def test_malformed(self, url):
        assert calculate_authority(url) == MALFORMED_URL_SCORE

    def test_scores_in_range(self):
        for url in ["https://cdc.gov", "https://x.com", "https://a.de", "junk"]:
            assert 0.0 <= calculate_authority(url) <= 1.0


class TestDomainMatching:

    def test_suffix_entry(self):
        assert domain_matches("nasa.gov", ".gov")
        assert domain_matches("data.gov.uk", ".gov")
        assert not domain_matches("governor.com", ".gov")

    def test_plain_entry(self):
        assert domain_matches("bbc.com", "bbc.com")
        assert domain_matches("news.bbc.com", "bbc.com")
        assert not domain_matches("notbbc.com", "bbc.com")


class TestSourceName:

    @pytest.mark.parametrize("url,expected", [
        ("https://www.nytimes.com/x", "New York Times"),
        ("https://en.wikipedia.org/wiki/X", "Wikipedia"),
        ("https://edition.cnn.com/x", "CNN"),
        ("https://apnews.com/article/x", "Associated Press"),
        ("https://www.my-local-paper.com/story", "My Local Paper"),
        ("https://9to5mac.com/2024/01/01/story", "9to5mac"),
        ("https://www.theverge-mirror.net/x", "Theverge Mirror"),
    ])
    def test_names(self, url, expected):
        assert extract_source_name(url) == expected

    def test_malformed(self):
        assert extract_source_name("garbage") == "Unknown Source"
