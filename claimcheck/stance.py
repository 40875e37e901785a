"""
Stance Detector — Does this source support or contradict the claim?

For one (claim, content) pair, runs an ordered cascade. Each step
either returns a definitive stance or defers to the next:

  1. Relevance gate       <20% of claim keywords in content → INCONCLUSIVE
  2. Numeric check        same quantity type, different value → CONTRADICTS
  3. Relation templates   content restates the claim's relation
                          (flipped to CONTRADICTS for negated claims)
  4. Explicit verdict     fact-checker rating phrasing
  5. Keyword balance      support vs. contradict signal counts

Numbers come first because numeric facts are unambiguous. When
signals are mixed or absent the result is INCONCLUSIVE.

No trained model is involved. This is lexical inference only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from claimcheck.models import CONTRADICTS, INCONCLUSIVE, SUPPORTS
from claimcheck.rules import Rule, any_match, count_matches, first_match, first_result, rule

RELEVANCE_THRESHOLD = 0.2
NUMERIC_TOLERANCE = 1
MAX_AGE = 125

STOP_WORDS = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "to", "of", "in",
    "for", "on", "with", "at", "by", "from", "as", "into", "through",
    "that", "which", "who", "whom", "this", "these", "those", "it",
    "and", "but", "or", "not", "no", "yes", "all", "each", "every",
})

_NON_WORD = re.compile(r"[^\w\s]")


# ============================================================
# 1. RELEVANCE
# ============================================================

def extract_keywords(text: str) -> list[str]:
    """Content words of the claim (stop-words and short tokens removed)."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS]


def calculate_relevance(keywords: list[str], content: str) -> float:
    """Fraction of keywords present in the content."""
    if not keywords:
        return 0.0
    hits = sum(1 for k in keywords if k in content)
    return hits / len(keywords)


def check_relevance(claim: str, content: str) -> Optional[str]:
    relevance = calculate_relevance(extract_keywords(claim), content)
    if relevance < RELEVANCE_THRESHOLD:
        return INCONCLUSIVE
    return None


# ============================================================
# 2. NUMERIC CONTRADICTION
# ============================================================

@dataclass(frozen=True)
class NumericPattern:
    context: str          # "age", "year", "height", "percentage", "amount"
    pattern: re.Pattern
    value_group: int = 1
    anchor_group: Optional[int] = None   # Word that must be a claim keyword
    max_value: Optional[float] = None


NUMERIC_PATTERNS: list[NumericPattern] = [
    NumericPattern("age", re.compile(r"(\d+)[\s-]*(?:years?\s*old|year[\s-]old)")),
    NumericPattern("age", re.compile(r"\baged?\s*(\d+)")),
    # "Trump is 78.": a bare number closing the clause after a copula,
    # only when the word before the copula names something in the claim
    NumericPattern(
        "age",
        re.compile(
            r"\b([a-z']+)\s+(?:is|was|turned|turns)\s+(\d{1,3})(?=\s*(?:[.,;:!?)]|$))"
        ),
        value_group=2,
        anchor_group=1,
        max_value=MAX_AGE,
    ),
    NumericPattern("year", re.compile(r"\b(?:in|born|since|from|year)\s*(1[89]\d{2}|20\d{2})\b")),
    NumericPattern("height", re.compile(
        r"(\d+(?:\.\d+)?)\s*(?:meters?|metres?|feet|foot|ft|cm|m)\b"
    )),
    NumericPattern("percentage", re.compile(r"(\d+(?:\.\d+)?)\s*(?:%|percent)")),
    NumericPattern("amount", re.compile(r"(\d+(?:\.\d+)?)\s*(?:million|billion|trillion)")),
]

_THOUSANDS_SEPARATOR = re.compile(r"(?<=\d),(?=\d{3}\b)")


def extract_numbers_with_context(
    text: str,
    anchors: Iterable[str] = (),
) -> list[tuple[float, str]]:
    """
    All (value, context) pairs found in text.

    Anchored patterns only count when the anchor word is in `anchors`
    (the claim's keywords).
    """
    anchors = frozenset(anchors)
    normalized = _THOUSANDS_SEPARATOR.sub("", text.lower())
    found: list[tuple[float, str]] = []
    for numeric in NUMERIC_PATTERNS:
        for match in numeric.pattern.finditer(normalized):
            if numeric.anchor_group is not None and match.group(numeric.anchor_group) not in anchors:
                continue
            try:
                value = float(match.group(numeric.value_group))
            except ValueError:
                continue
            if numeric.max_value is not None and value > numeric.max_value:
                continue
            found.append((value, numeric.context))
    return found


def detect_numeric_contradiction(claim: str, content: str) -> Optional[str]:
    """
    CONTRADICTS if claim and content give different values for the
    same kind of quantity.

    "trump is 30 years old" vs "... trump is 78." → CONTRADICTS
    """
    anchors = extract_keywords(claim)
    claim_numbers = extract_numbers_with_context(claim, anchors)
    if not claim_numbers:
        return None

    content_numbers = extract_numbers_with_context(content, anchors)
    for claim_value, claim_context in claim_numbers:
        for content_value, content_context in content_numbers:
            if claim_context != content_context:
                continue
            if abs(claim_value - content_value) > NUMERIC_TOLERANCE:
                return CONTRADICTS
    return None


# ============================================================
# 3. RELATION TEMPLATES
# ============================================================

NEGATION = re.compile(
    r"\b(?:not|never|wasn't|weren't|isn't|aren't|didn't|doesn't|don't|"
    r"hasn't|haven't|hadn't|cannot|can't|won't|wouldn't)\b"
)

# Dropped from template tokens so that negation and glue words never
# have to appear in the source text
_TEMPLATE_FILLER = frozenset({
    "the", "and", "for", "who", "that", "was", "were", "are", "has", "have",
    "had", "did", "does", "not", "never", "wasn't", "weren't", "isn't",
    "aren't", "didn't", "doesn't", "don't", "hasn't", "haven't", "hadn't",
    "cannot", "can't", "won't", "wouldn't",
})

_NAME = r"([a-z\s\-']+)"


@dataclass(frozen=True)
class RelationTemplate:
    """
    A claim shape plus the evidence a source must show to restate it.

    A source matches when it contains every subject token, at least
    one indicator, and every entity token. Indicators are either fixed
    keywords or taken from a claim group (e.g. the location itself).
    """
    id: str
    pattern: re.Pattern
    subject_group: int
    indicators: tuple[str, ...] = ()
    indicator_group: Optional[int] = None
    entity_group: Optional[int] = None
    literal_group: Optional[int] = None      # Must appear verbatim (e.g. a count)
    require_uncontested: bool = False         # Content must carry no contradiction keywords


def _tokens(text: Optional[str]) -> list[str]:
    if not text:
        return []
    return [
        t for t in text.strip().lower().split()
        if len(t) > 2 and t not in _TEMPLATE_FILLER
    ]


RELATION_TEMPLATES: list[RelationTemplate] = [
    RelationTemplate(
        id="FOUNDED_BY",
        pattern=re.compile(
            _NAME + r" (?:was |is )?(?:founded|created|started|established|built|launched) by "
            + _NAME
        ),
        subject_group=2,
        entity_group=1,
        indicators=("founded", "founder", "co-founder", "ceo", "creator",
                    "started", "built", "established", "launched"),
    ),
    RelationTemplate(
        id="LEADERSHIP_ROLE",
        pattern=re.compile(
            _NAME + r" (?:is|was|became) (?:the )?"
            r"(?:ceo|founder|co-founder|creator|president|chairman) (?:of |at )?([a-z\s\-']*)"
        ),
        subject_group=1,
        entity_group=2,
        indicators=("ceo", "founder", "co-founder", "creator", "president",
                    "chairman", "chief executive"),
    ),
    RelationTemplate(
        id="AUTHORED_BY",
        pattern=re.compile(r"(?:written|wrote|authored|penned) by " + _NAME),
        subject_group=1,
        indicators=("wrote", "written", "author", "authored", "penned", "writer"),
    ),
    RelationTemplate(
        id="AUTHORED",
        pattern=re.compile(_NAME + r" (?:wrote|authored|penned) " + _NAME),
        subject_group=1,
        entity_group=2,
        indicators=("wrote", "written", "author", "authored", "penned", "writer"),
    ),
    RelationTemplate(
        id="INVENTED",
        pattern=re.compile(
            _NAME + r" (?:invented|discovered|created|developed|designed) " + _NAME
        ),
        subject_group=1,
        entity_group=2,
        indicators=("invented", "discovered", "created", "developed", "designed",
                    "inventor", "discoverer"),
    ),
    RelationTemplate(
        id="OWNS",
        pattern=re.compile(_NAME + r" (?:owns|owned|acquired|bought|purchased) " + _NAME),
        subject_group=1,
        entity_group=2,
        indicators=("owns", "owned", "acquired", "bought", "purchased",
                    "acquisition", "owner"),
    ),
    RelationTemplate(
        id="AWARDED",
        pattern=re.compile(_NAME + r" (?:won|received|earned|awarded|got) (?:the )?" + _NAME),
        subject_group=1,
        entity_group=2,
        indicators=("won", "winner", "received", "awarded", "earned",
                    "recipient", "laureate"),
    ),
    RelationTemplate(
        id="EMPLOYED",
        pattern=re.compile(_NAME + r" (?:works|worked|employed) (?:at|by|for) " + _NAME),
        subject_group=1,
        entity_group=2,
        indicators=("works", "worked", "employee", "employed", "staff", "team"),
    ),
    RelationTemplate(
        id="MARRIED",
        pattern=re.compile(
            _NAME + r" (?:is|was) (?:married to|the (?:wife|husband|spouse|partner) of) " + _NAME
        ),
        subject_group=1,
        entity_group=2,
        indicators=("married", "wife", "husband", "spouse", "partner", "wedding"),
    ),
    RelationTemplate(
        id="BORN",
        pattern=re.compile(_NAME + r" (?:was )?born (?:in|on) ([a-z0-9\s,\-]+)"),
        subject_group=1,
        entity_group=2,
        indicators=("born", "birth", "birthday", "birthplace", "native"),
    ),
    RelationTemplate(
        id="DIED",
        pattern=re.compile(_NAME + r" died (?:in|on) ([a-z0-9\s,\-]+)"),
        subject_group=1,
        entity_group=2,
        indicators=("died", "death", "passed away", "deceased"),
    ),
    RelationTemplate(
        id="LOCATED_IN",
        pattern=re.compile(
            _NAME + r" (?:is|are|was|were) (?:located |based |headquartered )?in ([a-z\s,\-']+)"
        ),
        subject_group=1,
        indicator_group=2,
    ),
    RelationTemplate(
        id="QUANTITY",
        pattern=re.compile(
            _NAME + r" has (\d+[\d,]*)\s*"
            r"(employees|users|members|customers|subscribers|followers)"
        ),
        subject_group=1,
        indicator_group=3,
        literal_group=2,
    ),
    RelationTemplate(
        id="IDENTITY",
        pattern=re.compile(_NAME + r" (?:is|was|are|were) (?:a |an |the )?" + _NAME),
        subject_group=1,
        indicator_group=2,
        require_uncontested=True,
    ),
]


def _template_indicators(template: RelationTemplate, match: re.Match) -> list[str]:
    if template.indicator_group is None:
        return list(template.indicators)
    words = _tokens(match.group(template.indicator_group).replace(",", " "))
    # Plural units also match their singular form
    return words + [w[:-1] for w in words if w.endswith("s")]


def _template_holds(template: RelationTemplate, match: re.Match, content: str) -> bool:
    subject = _tokens(match.group(template.subject_group))
    if not subject or not all(t in content for t in subject):
        return False

    indicators = _template_indicators(template, match)
    if not indicators or not any(i in content for i in indicators):
        return False

    if template.entity_group is not None:
        entity = _tokens(match.group(template.entity_group).replace(",", " "))
        if not all(t in content for t in entity):
            return False

    if template.literal_group is not None:
        literal = match.group(template.literal_group).replace(",", "")
        if literal not in content.replace(",", ""):
            return False

    if template.require_uncontested and any_match(CONTRADICT_RULES, content):
        return False
    return True


def detect_semantic_match(claim: str, content: str) -> Optional[str]:
    """
    SUPPORTS when the source restates the claim's relation; CONTRADICTS
    when it restates a relation the claim negates.

    "facebook was not founded by mark zuckerberg" vs
    "mark zuckerberg founded facebook" → CONTRADICTS
    """
    negated = bool(NEGATION.search(claim))
    for template in RELATION_TEMPLATES:
        match = template.pattern.search(claim)
        if match and _template_holds(template, match, content):
            return CONTRADICTS if negated else SUPPORTS
    return None


# ============================================================
# 4. EXPLICIT VERDICTS + 5. KEYWORD SIGNALS
# ============================================================

SUPPORT_RULES: list[Rule] = [
    rule("SUPPORT_AFFIRMATION", SUPPORTS,
         r"\b(?:confirmed?|verified|true|correct|accurate|factual|valid)\b"),
    rule("SUPPORT_EMPHATIC_COPULA", SUPPORTS,
         r"\b(?:is|are|was|were|has been) (?:indeed|in fact|actually)\b"),
    rule("SUPPORT_EVIDENCE", SUPPORTS,
         r"\b(?:evidence shows|research confirms|data supports|studies show)\b"),
    rule("SUPPORT_OFFICIAL", SUPPORTS,
         r"\b(?:according to official|officially confirmed)\b"),
]

CONTRADICT_RULES: list[Rule] = [
    rule("CONTRADICT_FALSITY", CONTRADICTS,
         r"\b(?:false|incorrect|inaccurate|wrong|untrue|debunked|disproven)\b"),
    rule("CONTRADICT_FABRICATION", CONTRADICTS,
         r"\b(?:myth|hoax|fake|fabricated|misleading|misinformation)\b"),
    rule("CONTRADICT_NO_EVIDENCE", CONTRADICTS,
         r"\b(?:no evidence|lacks evidence|unsubstantiated|unverified)\b"),
    rule("CONTRADICT_REBUTTAL", CONTRADICTS,
         r"\b(?:contrary to|contradicts|refutes|disputes)\b"),
    rule("CONTRADICT_NOT_TRUE", CONTRADICTS,
         r"\b(?:not true|isn't true|wasn't true|weren't true)\b"),
]

_RATING_WORD = r"\b(?:rating|verdict|ruling)\b"

# Order is intentional: label-adjacent forms ("rating: false") before loose
# co-occurrence, and the false family before the true family, so a rating
# sentence carrying both words reads as CONTRADICTS.
EXPLICIT_VERDICT_RULES: list[Rule] = [
    rule("VERDICT_LABEL_TRUE", SUPPORTS,
         r"\b(?:verdict|rating|status|ruling)[:\s]*(?:mostly true|true|correct|confirmed)\b"),
    rule("VERDICT_LABEL_FALSE", CONTRADICTS,
         r"\b(?:verdict|rating|status|ruling)[:\s]*"
         r"(?:mostly false|pants on fire|false|incorrect|fake|hoax)\b"),
    rule("VERDICT_MENTIONS_FALSE", CONTRADICTS,
         r"\b(?:false|pants on fire|mostly false)\b",
         requires=[_RATING_WORD]),
    rule("VERDICT_MENTIONS_TRUE", SUPPORTS,
         r"\b(?:true|mostly true)\b",
         requires=[_RATING_WORD],
         excludes=[r"\b(?:not|isn't|wasn't|weren't)\s+true\b"]),
]


def detect_explicit_verdict(content: str) -> Optional[str]:
    """Fact-checker rating phrasing, e.g. "our rating: false"."""
    matched = first_match(EXPLICIT_VERDICT_RULES, content)
    return matched.label if matched else None


def score_keyword_signals(content: str) -> tuple[int, int]:
    """(support_count, contradict_count) over the keyword rule sets."""
    return count_matches(SUPPORT_RULES, content), count_matches(CONTRADICT_RULES, content)


def keyword_stance(content: str) -> str:
    support, contradict = score_keyword_signals(content)
    difference = support - contradict

    if difference >= 2:
        return SUPPORTS
    if difference <= -2:
        return CONTRADICTS
    if support > 0 and contradict == 0:
        return SUPPORTS
    if contradict > 0 and support == 0:
        return CONTRADICTS
    return INCONCLUSIVE


# ============================================================
# CASCADE
# ============================================================

STANCE_STEPS = (
    check_relevance,
    detect_numeric_contradiction,
    detect_semantic_match,
    lambda claim, content: detect_explicit_verdict(content),
    lambda claim, content: keyword_stance(content),
)


def detect_stance(claim_text: str, content: str) -> str:
    """SUPPORTS, CONTRADICTS or INCONCLUSIVE for one claim/content pair."""
    return first_result(STANCE_STEPS, claim_text.lower(), content.lower())
