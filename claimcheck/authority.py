"""
Authority Scorer — Source Credibility by Domain

Maps a source URL to a credibility weight in [0, 1]:

  1. Low-authority deny-list (social, UGC video, blog platforms,
     forums, partisan/tabloid, content farms)          → 0.25
  2. Credibility tiers, first match wins               → 0.95 / 0.85 / 0.75 / 0.70
  3. Any other .com / .org / .net / .io host           → 0.50
  4. Unknown domain                                    → 0.40
  Malformed URL                                        → 0.30

Tier order is priority, not just grouping. Entries starting with a
dot are suffixes (".gov" matches "cdc.gov" and "data.gov.uk");
other entries match the host itself or any of its subdomains.
Matching is per label, a deliberate tightening of plain substring
matching: "netflix.com" does not hit the "x.com" deny entry, so it
scores 0.50 rather than 0.25.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

LOW_AUTHORITY_SCORE = 0.25
GENERIC_TLD_SCORE = 0.50
UNKNOWN_DOMAIN_SCORE = 0.40
MALFORMED_URL_SCORE = 0.30

GENERIC_TLDS = (".com", ".org", ".net", ".io")


@dataclass(frozen=True)
class AuthorityTier:
    name: str
    score: float
    domains: tuple[str, ...]


LOW_AUTHORITY_DOMAINS: tuple[str, ...] = (
    # Social media
    "twitter.com", "x.com", "facebook.com", "instagram.com", "threads.net",
    "reddit.com", "tiktok.com", "snapchat.com", "pinterest.com",
    "linkedin.com", "tumblr.com", "discord.com",
    # User-generated video
    "youtube.com", "twitch.tv", "vimeo.com", "dailymotion.com",
    # Blogging platforms
    "medium.com", "substack.com", "wordpress.com", "blogspot.com",
    "blogger.com", "wix.com", "squarespace.com", "ghost.io",
    # Forums / Q&A
    "quora.com", "answers.yahoo.com", "stackexchange.com",
    # Partisan / opinion
    "breitbart.com", "infowars.com", "dailywire.com", "theblaze.com",
    "huffpost.com", "rawstory.com", "dailykos.com", "motherjones.com",
    # Tabloids
    "dailymail.co.uk", "nypost.com", "thesun.co.uk", "mirror.co.uk",
    "tmz.com", "pagesix.com", "eonline.com", "usmagazine.com",
    # Content farms / aggregators
    "buzzfeed.com", "boredpanda.com", "distractify.com",
    # Known misinformation
    "naturalnews.com", "globalresearch.ca", "zerohedge.com",
)

AUTHORITY_TIERS: tuple[AuthorityTier, ...] = (
    AuthorityTier(
        name="primary",   # government, academic, fact-checkers, wires, journals
        score=0.95,
        domains=(
            ".gov", ".edu", ".mil",
            "snopes.com", "politifact.com", "factcheck.org", "fullfact.org",
            "africacheck.org", "chequeado.com", "verificat.cat",
            "reuters.com", "apnews.com", "afp.com",
            "nature.com", "science.org", "thelancet.com", "nejm.org",
            "who.int", "cdc.gov", "nih.gov", "pubmed.ncbi.nlm.nih.gov",
        ),
    ),
    AuthorityTier(
        name="major_editorial",
        score=0.85,
        domains=(
            "nytimes.com", "washingtonpost.com", "wsj.com",
            "bbc.com", "bbc.co.uk", "theguardian.com", "economist.com",
            "npr.org", "pbs.org", "c-span.org",
            "propublica.org", "theatlantic.com", "newyorker.com",
            "ft.com", "bloomberg.com", "politico.com",
            "dw.com", "france24.com", "aljazeera.com", "scmp.com",
            "abc.net.au", "cbc.ca", "globalnews.ca",
        ),
    ),
    AuthorityTier(
        name="established_news",
        score=0.75,
        domains=(
            "cnn.com", "usatoday.com", "latimes.com", "chicagotribune.com",
            "nbcnews.com", "cbsnews.com", "abcnews.go.com",
            "time.com", "forbes.com", "businessinsider.com", "fortune.com",
            "newsweek.com", "thehill.com", "axios.com", "vox.com",
            "slate.com", "salon.com", "thedailybeast.com",
            "wired.com", "arstechnica.com", "theverge.com", "techcrunch.com",
            "espn.com", "sports.yahoo.com",
            "bostonglobe.com", "sfchronicle.com", "dallasnews.com",
            "seattletimes.com", "denverpost.com", "miamiherald.com",
        ),
    ),
    AuthorityTier(
        name="reference",
        score=0.70,
        domains=(
            "wikipedia.org", "britannica.com", "encyclopedia.com",
            "merriam-webster.com", "dictionary.com", "oxforddictionaries.com",
            "investopedia.com", "webmd.com", "mayoclinic.org", "healthline.com",
            "history.com", "biography.com", "imdb.com",
            "statista.com", "worldbank.org", "data.gov",
        ),
    ),
)

# Display names for well-known outlets
SOURCE_NAMES: dict[str, str] = {
    "nytimes.com": "New York Times",
    "washingtonpost.com": "Washington Post",
    "bbc.com": "BBC",
    "bbc.co.uk": "BBC",
    "reuters.com": "Reuters",
    "apnews.com": "Associated Press",
    "cnn.com": "CNN",
    "theguardian.com": "The Guardian",
    "wikipedia.org": "Wikipedia",
    "en.wikipedia.org": "Wikipedia",
    "snopes.com": "Snopes",
    "politifact.com": "PolitiFact",
    "factcheck.org": "FactCheck.org",
    "usatoday.com": "USA Today",
    "npr.org": "NPR",
    "pbs.org": "PBS",
}


def get_hostname(url: str) -> Optional[str]:
    """Lower-cased hostname, or None for malformed URLs."""
    try:
        hostname = urlsplit(url.strip()).hostname
    except (ValueError, AttributeError):
        return None
    return hostname.lower() if hostname else None


def domain_matches(hostname: str, domain: str) -> bool:
    if domain.startswith("."):
        return hostname.endswith(domain) or f"{domain}." in hostname
    return hostname == domain or hostname.endswith(f".{domain}")


def calculate_authority(url: str) -> float:
    """Credibility weight for a source URL."""
    hostname = get_hostname(url)
    if hostname is None:
        return MALFORMED_URL_SCORE

    for domain in LOW_AUTHORITY_DOMAINS:
        if domain_matches(hostname, domain):
            return LOW_AUTHORITY_SCORE

    for tier in AUTHORITY_TIERS:
        for domain in tier.domains:
            if domain_matches(hostname, domain):
                return tier.score

    if hostname.endswith(GENERIC_TLDS):
        return GENERIC_TLD_SCORE
    return UNKNOWN_DOMAIN_SCORE


def extract_source_name(url: str) -> str:
    """
    Human-readable source name.

    https://www.nytimes.com/...  → "New York Times"
    https://my-local-paper.com/  → "My Local Paper"
    https://9to5mac.com/         → "9to5mac"
    """
    hostname = get_hostname(url)
    if hostname is None:
        return "Unknown Source"
    if hostname.startswith("www."):
        hostname = hostname[4:]

    if hostname in SOURCE_NAMES:
        return SOURCE_NAMES[hostname]
    base_domain = ".".join(hostname.split(".")[-2:])
    if base_domain in SOURCE_NAMES:
        return SOURCE_NAMES[base_domain]

    # Only word-initial letters are raised: "9to5mac" stays "9to5mac"
    words = hostname.split(".")[0].replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)
