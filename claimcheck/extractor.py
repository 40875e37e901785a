"""
Claim Extractor — Segmenter, Classifier, Neutralizer

Turns raw text into atomic, classified claims:

  1. Split text into sentences (abbreviation-safe)
  2. Split compound sentences into atomic claims, but only when
     every fragment is itself a plausible clause
  3. Drop fragments, structureless text and rhetorical questions
  4. Classify each claim (first matching rule wins)
  5. Rephrase to a neutral declarative form for searching

Deterministic and side-effect free apart from claim id generation.
Prefers false negatives: an opinion should never be "verified".
"""

from __future__ import annotations

import re
import secrets
import string
import time

from claimcheck.models import (
    AMBIGUOUS,
    FACTUAL,
    OPINION,
    PREDICTION,
    Claim,
)
from claimcheck.rules import Rule, first_match, rule

MIN_CLAIM_LENGTH = 10
COMPOUND_MIN_LENGTH = 50

# Placeholder for periods that must not end a sentence
_PROTECTED_DOT = "⁘"

_ABBREVIATIONS = re.compile(
    r"\b(Mr|Mrs|Ms|Dr|Prof|Jr|Sr|St|vs|etc|Inc|Ltd|e\.g|i\.e)\."
)
_US = re.compile(r"\bU\.S\.")
_DECIMAL = re.compile(r"(\d)\.(?=\d)")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_COMPOUND_SPLIT = re.compile(r"(?:,?\s+(?:and|but|or|yet)\s+|;\s*)", re.IGNORECASE)


# ============================================================
# CLASSIFICATION RULES (order is priority)
# ============================================================

FACTUAL_INDICATORS: list[Rule] = [
    rule("FACT_STATE_OF_BEING", FACTUAL,
         r"\b(?:is|are|was|were|has been|have been)\b"),
    rule("FACT_DATE", FACTUAL,
         r"\b(?:in \d{4}|on \d+/\d+/\d+|born|died|founded|established)\b"),
    rule("FACT_RELATION", FACTUAL,
         r"\b(?:located in|capital of|population of|invented|discovered)\b"),
    rule("FACT_STATISTIC", FACTUAL,
         r"(?:\b\d+%|\b\d+ percent\b|\b\d+ million\b|\b\d+ billion\b)"),
    rule("FACT_CITATION", FACTUAL,
         r"\b(?:according to|research shows|studies show|data shows)\b"),
]

_FACTUAL_OVERRIDES = tuple(r.pattern for r in FACTUAL_INDICATORS)

OPINION_RULES: list[Rule] = [
    rule("OPINION_FIRST_PERSON", OPINION,
         r"\b(?:i think|i believe|i feel|in my opinion|personally|arguably|seems to me)\b"),
    rule("OPINION_SUPERLATIVE", OPINION,
         r"\b(?:best|worst|greatest|terrible|amazing|horrible|beautiful|ugly)\b"),
    rule("OPINION_OBLIGATION", OPINION,
         r"\b(?:should|ought to|must|need to)\b"),
    rule("OPINION_VALUE_VERB", OPINION,
         r"\b(?:love|hate|like|dislike|prefer)\b"),
    rule("OPINION_RATING", OPINION,
         r"\b(?:overrated|underrated)\b"),
]

PREDICTION_RULES: list[Rule] = [
    rule("PREDICTION_FUTURE_TENSE", PREDICTION,
         r"\b(?:will|going to|gonna|about to)\b.*\b(?:be|become|happen|occur)\b"),
    rule("PREDICTION_TIME_EXPRESSION", PREDICTION,
         r"\b(?:by \d{4}|in the future|next year|soon|eventually)\b"),
    rule("PREDICTION_FORECAST_VERB", PREDICTION,
         r"\b(?:predict|forecast|expect|anticipate)\b"),
    rule("PREDICTION_HEDGED", PREDICTION,
         r"\b(?:likely to|probably will|might|could potentially)\b"),
]

# Ambiguity is overridden whenever a factual indicator is also present
AMBIGUITY_RULES: list[Rule] = [
    Rule(
        id="AMBIGUOUS_BARE_PRONOUN",
        label=AMBIGUOUS,
        pattern=re.compile(
            r"\b(?:this|that|it|they|them|he|she)\b"
            r"(?! is| are| was| were| has| have| had)",
            re.IGNORECASE,
        ),
        excludes=_FACTUAL_OVERRIDES,
    ),
    Rule(
        id="AMBIGUOUS_VAGUE_QUANTIFIER",
        label=AMBIGUOUS,
        pattern=re.compile(r"\b(?:some|many|few|several|various|certain)\b", re.IGNORECASE),
        excludes=_FACTUAL_OVERRIDES,
    ),
    Rule(
        id="AMBIGUOUS_VAGUE_NOUN",
        label=AMBIGUOUS,
        pattern=re.compile(r"\b(?:stuff|things|something|somewhere)\b", re.IGNORECASE),
        excludes=_FACTUAL_OVERRIDES,
    ),
    Rule(
        id="AMBIGUOUS_LEADING_CONJUNCTION",
        label=AMBIGUOUS,
        pattern=re.compile(r"^(?:and|but|or|so|because|however)\b", re.IGNORECASE),
        excludes=_FACTUAL_OVERRIDES,
    ),
]

CLASSIFICATION_RULES: list[Rule] = (
    OPINION_RULES + PREDICTION_RULES + AMBIGUITY_RULES + FACTUAL_INDICATORS
)


# ============================================================
# STRUCTURE HEURISTICS
# ============================================================

_VERB_PATTERN = re.compile(
    r"\b(?:is|are|was|were|has|have|had|do|does|did|can|could|will|would|should|"
    r"may|might|been|being|made|said|went|came|took|gave|found|thought|knew|saw|"
    r"got|became|let|began|put|run|bring|become|grow|draw|show|hear|play|move|"
    r"live|die|work|use|seem|feel|try|leave|call|keep|hold|turn|allow|start|"
    r"stand|lose|pay|meet|include|continue|set|learn|change|lead|understand|"
    r"watch|follow|stop|create|speak|read|spend|win|happen|provide|sit|buy|send|"
    r"build|stay|fall|cut|reach|kill|raise|pass|sell|decide|return|explain|hope|"
    r"develop|carry|break|receive|agree|support|hit|produce|eat|cover|catch|"
    r"require|believe|remember|love|consider|appear|walk|wait|serve|remain|"
    r"offer|fight|throw|accept|save|perform|act|add|cause|point|suggest|answer|"
    r"charge|join|enjoy|teach|enter|fear|"
    r"freezes|boils|melts|orbits|contains|equals|measures|weighs|covers|"
    r"consists|causes|owns|runs|wrote|won|born|died|"
    r"[a-z]{3,}ed)\b",
    re.IGNORECASE,
)

_RHETORICAL_PATTERNS = [
    re.compile(r"^(?:who|what|where|when|why|how) (?:cares|knows|would|could|can)\?", re.IGNORECASE),
    re.compile(r"^isn't it (?:obvious|clear|true)", re.IGNORECASE),
    re.compile(r"\?{2,}"),
    re.compile(r"^(?:really|seriously|honestly)\?", re.IGNORECASE),
]

_IMPERATIVE = re.compile(
    r"^(?:do|don't|please|let's|go|come|stop|start|make|take|give|put|get|try|"
    r"look|think|be|have)\b",
    re.IGNORECASE,
)


def contains_subject_and_verb(text: str) -> bool:
    """At least two words and something verb-like."""
    if len(text.split()) < 2:
        return False
    return bool(_VERB_PATTERN.search(text))


def is_rhetorical_question(text: str) -> bool:
    if "?" not in text:
        return False
    stripped = text.strip()
    return any(p.search(stripped) for p in _RHETORICAL_PATTERNS)


def is_declarative_statement(text: str) -> bool:
    """Not a question and not a command."""
    stripped = text.strip()
    if stripped.endswith("?"):
        return False
    return not _IMPERATIVE.search(stripped)


# ============================================================
# SEGMENTER
# ============================================================

def split_into_sentences(text: str) -> list[str]:
    """Split on terminal punctuation without breaking abbreviations or decimals."""
    protected = _ABBREVIATIONS.sub(lambda m: m.group(1) + _PROTECTED_DOT, text)
    protected = _US.sub(f"U{_PROTECTED_DOT}S{_PROTECTED_DOT}", protected)
    protected = _DECIMAL.sub(lambda m: m.group(1) + _PROTECTED_DOT, protected)

    sentences = []
    for part in _SENTENCE_BREAK.split(protected):
        restored = part.replace(_PROTECTED_DOT, ".").strip()
        if restored:
            sentences.append(restored)
    return sentences


def split_into_atomic_claims(sentence: str) -> list[str]:
    """
    Split a compound sentence on conjunctions and semicolons.

    "The sky is blue and grass is green" → ["The sky is blue", "grass is green"]

    The split is all-or-nothing: if any fragment is too short or lacks
    a subject+verb shape, the sentence is returned whole.
    """
    if len(sentence) < COMPOUND_MIN_LENGTH:
        return [sentence]

    parts = [p.strip() for p in _COMPOUND_SPLIT.split(sentence)]
    if len(parts) < 2:
        return [sentence]

    for part in parts:
        if len(part) < MIN_CLAIM_LENGTH or not contains_subject_and_verb(part):
            return [sentence]
    return parts


# ============================================================
# CLASSIFIER
# ============================================================

def classify_claim(text: str) -> str:
    """Assign FACTUAL / OPINION / PREDICTION / AMBIGUOUS. Pure function of text."""
    normalized = text.lower()
    matched = first_match(CLASSIFICATION_RULES, normalized)
    if matched is not None:
        return matched.label
    return FACTUAL if is_declarative_statement(text) else AMBIGUOUS


# ============================================================
# NEUTRALIZER
# ============================================================

_ATTRIBUTION_PREFIXES = [
    re.compile(r"^it is (?:said|claimed|reported|alleged|believed) that\s*", re.IGNORECASE),
    re.compile(r"^according to [^,]+,\s*", re.IGNORECASE),
    re.compile(r"^some (?:people |experts )?say (?:that\s*)?", re.IGNORECASE),
    re.compile(r"^it'?s? (?:obvious|clear|evident) that\s*", re.IGNORECASE),
]

_ATTRIBUTION_SUFFIX = re.compile(
    r",?\s*(?:according to [^.]+|experts say|sources report)\.?$",
    re.IGNORECASE,
)


def rephrase_to_neutral(text: str) -> str:
    """
    Strip attribution and editorial framing.

    "According to NASA, the moon is 384,400 km away" → "The moon is 384,400 km away."
    """
    neutral = text.strip()
    original = neutral

    for prefix in _ATTRIBUTION_PREFIXES:
        neutral = prefix.sub("", neutral)
    prefix_removed = neutral != original

    neutral = _ATTRIBUTION_SUFFIX.sub("", neutral)

    if neutral and prefix_removed:
        neutral = neutral[0].upper() + neutral[1:]

    if neutral and neutral[-1] not in ".!?":
        neutral += "."
    return neutral


# ============================================================
# EXTRACTION
# ============================================================

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_claim_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"claim_{int(time.time() * 1000)}_{suffix}"


def extract_claims(text: str) -> list[Claim]:
    """Extract atomic, classified claims from raw text."""
    if not text or not text.strip():
        return []

    fragments: list[str] = []
    for sentence in split_into_sentences(text):
        fragments.extend(split_into_atomic_claims(sentence))

    claims: list[Claim] = []
    for fragment in fragments:
        if len(fragment) < MIN_CLAIM_LENGTH or not contains_subject_and_verb(fragment):
            continue
        if is_rhetorical_question(fragment):
            continue
        claims.append(Claim(
            id=generate_claim_id(),
            text=rephrase_to_neutral(fragment),
            original_text=fragment.strip(),
            classification=classify_claim(fragment),
        ))
    return claims


def get_factual_claims(claims: list[Claim]) -> list[Claim]:
    """Only FACTUAL claims are sent for verification."""
    return [c for c in claims if c.is_factual]
