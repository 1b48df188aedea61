"""
Text analysis primitives for response scoring

Regex and keyword heuristics shared by the evaluation engine. Every scorer
returns a CriterionScore normalized to 0-100; blank text scores 0.
"""

import re

from src.models.evaluation import CriterionScore, ScoreKind
from src.models.question import Question


# ============================================================================
# VOCABULARIES
# ============================================================================

TECHNICAL_TERMS = [
    "react", "javascript", "node", "database", "api", "algorithm",
    "data structure", "performance", "security", "testing", "deployment",
    "architecture", "design pattern", "framework", "library", "optimization",
    "scalability", "microservices", "cloud",
]

STOPWORDS = {
    "about", "after", "again", "also", "been", "being", "could", "does",
    "done", "each", "from", "have", "into", "just", "more", "most", "only",
    "other", "over", "some", "such", "than", "that", "their", "them", "then",
    "there", "these", "they", "this", "those", "through", "very", "were",
    "what", "when", "where", "which", "while", "will", "with", "would",
    "your", "tell", "describe", "explain",
}

KEYWORD_LIMIT = 10

STAR_PATTERNS: dict[str, re.Pattern] = {
    "situation": re.compile(
        r"\b(in my (previous|last|current) (role|job|position|company|team)|"
        r"at my (last|previous)|when i was|i faced|we faced|situation|context|background|setting)\b",
        re.IGNORECASE,
    ),
    "task": re.compile(
        r"\b(had to|needed to|was asked to|responsible for|my goal|the goal|"
        r"deadline|task|challenge|objective|problem)\b",
        re.IGNORECASE,
    ),
    "action": re.compile(
        r"\b(i (\w+ed|rewrote|built|led|wrote|made|took|ran|drove|chose|began|"
        r"set up|spoke|met|found|gave|broke)|implemented|decided|created|organized|"
        r"developed|approached|did|action)\b",
        re.IGNORECASE,
    ),
    "result": re.compile(
        r"\b(shipped|delivered|result(ed|s)?|outcome|impact|achieved|learned|"
        r"saved|reduced|increased|improved|early|success(ful|fully)?)\b",
        re.IGNORECASE,
    ),
}

DEPTH_PATTERNS = {
    "examples": re.compile(r"example|instance|case|situation|project|experience", re.IGNORECASE),
    "analysis": re.compile(r"because|therefore|however|although|analysis|consider", re.IGNORECASE),
    "insights": re.compile(r"learned|realized|discovered|insight|understanding", re.IGNORECASE),
}

SPECIFICITY_PATTERNS = {
    "numbers": re.compile(r"\d+"),
    "precision": re.compile(r"specific|particular|exact|precise", re.IGNORECASE),
    "examples": re.compile(r"for example|such as|including", re.IGNORECASE),
    "metrics": re.compile(r"\$\d+|\d+%|\d+ (days|weeks|months|years)", re.IGNORECASE),
}

# Phrase families per criterion: one hit per family that matches
PATTERN_FAMILIES: dict[str, list[re.Pattern]] = {
    "practical_application": [
        re.compile(r"project|experience|implemented|built|developed", re.IGNORECASE),
        re.compile(r"example|instance|case study", re.IGNORECASE),
        re.compile(r"production|real.world|actual", re.IGNORECASE),
    ],
    "problem_solving": [
        re.compile(r"approach|strategy|solution|method", re.IGNORECASE),
        re.compile(r"analy[sz]e|consider|evaluate|assess", re.IGNORECASE),
        re.compile(r"because|therefore|since|due to", re.IGNORECASE),
    ],
    "problem_analysis": [
        re.compile(r"identify|analy[sz]e|break down|examine", re.IGNORECASE),
        re.compile(r"root cause|underlying|factors", re.IGNORECASE),
        re.compile(r"consider|evaluate|assess", re.IGNORECASE),
    ],
    "decision_making": [
        re.compile(r"decide|choose|select|determine", re.IGNORECASE),
        re.compile(r"criteria|factors|considerations", re.IGNORECASE),
        re.compile(r"weigh|compare|evaluate options", re.IGNORECASE),
    ],
    "stakeholder_consideration": [
        re.compile(r"stakeholder|team|client|customer", re.IGNORECASE),
        re.compile(r"communicate|discuss|collaborate", re.IGNORECASE),
        re.compile(r"impact|affect|consider", re.IGNORECASE),
    ],
    "risk_assessment": [
        re.compile(r"risk|challenge|issue|problem", re.IGNORECASE),
        re.compile(r"mitigation|prevention|contingency", re.IGNORECASE),
        re.compile(r"potential|possible|might|could", re.IGNORECASE),
    ],
    "engagement": [
        re.compile(r"\b(i|my|we|our)\b", re.IGNORECASE),
        re.compile(r"excited|passionate|interested|enjoy", re.IGNORECASE),
    ],
}

_PUNCTUATION = re.compile(r"[^\w\s]")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_LONG_WORD = re.compile(r"\b\w{7,}\b")


def _is_blank(text: str | None) -> bool:
    return not text or not text.strip()


def _ratio(hits: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(min(100.0, hits * 100 / total), 2)


# ============================================================================
# KEYWORDS
# ============================================================================

def extract_keywords(text: str, limit: int = KEYWORD_LIMIT) -> list[str]:
    """
    First distinct non-trivial words of a text.

    Punctuation is stripped and words of three letters or fewer, as well
    as stopwords, are ignored.
    """
    keywords: list[str] = []
    for word in _PUNCTUATION.sub("", (text or "").lower()).split():
        if len(word) <= 3 or word in STOPWORDS or word in keywords:
            continue
        keywords.append(word)
        if len(keywords) >= limit:
            break
    return keywords


def extract_technical_terms(text: str) -> list[str]:
    lowered = (text or "").lower()
    return [term for term in TECHNICAL_TERMS if term in lowered]


def count_sentences(text: str) -> int:
    return sum(1 for part in _SENTENCE_SPLIT.split(text or "") if part.strip())


# ============================================================================
# SCORERS
# ============================================================================

def score_star(text: str) -> CriterionScore:
    """Situation/Task/Action/Result presence, 25 points each."""
    components = {
        name: bool(pattern.search(text or ""))
        for name, pattern in STAR_PATTERNS.items()
    }
    total = sum(25 for present in components.values() if present)
    return CriterionScore(kind=ScoreKind.STAR, value=total, details=components)


def score_clarity(text: str) -> CriterionScore:
    """Four structural checks worth 25 points each."""
    text = text or ""
    stripped = text.strip()
    checks = {
        "structure": len(stripped) > 50 and bool(re.search(r"[.!?]", stripped)),
        "vocabulary": len(_LONG_WORD.findall(stripped)) >= 3,
        "coherence": count_sentences(stripped) >= 2,
        "conciseness": 100 <= len(stripped) <= 500,
    }
    total = sum(25 for passed in checks.values() if passed)
    return CriterionScore(kind=ScoreKind.FLAG_SUM, value=total, details=checks)


def score_relevance(question_text: str, text: str) -> CriterionScore:
    """Share of the question's keywords echoed in the response keywords."""
    question_keywords = extract_keywords(question_text)
    if _is_blank(text) or not question_keywords:
        return CriterionScore.zero(
            ScoreKind.KEYWORD_OVERLAP,
            matched=[],
            total=len(question_keywords),
        )

    response_keywords = extract_keywords(text)
    matched = [
        keyword for keyword in question_keywords
        if any(keyword in candidate for candidate in response_keywords)
    ]
    return CriterionScore(
        kind=ScoreKind.KEYWORD_OVERLAP,
        value=_ratio(len(matched), len(question_keywords)),
        details={"matched": matched, "total": len(question_keywords)},
    )


def score_depth(text: str) -> CriterionScore:
    """Examples, details, analysis and insight markers, 25 points each."""
    text = text or ""
    flags = {
        "examples": bool(DEPTH_PATTERNS["examples"].search(text)),
        "details": len(text.strip()) > 150,
        "analysis": bool(DEPTH_PATTERNS["analysis"].search(text)),
        "insights": bool(DEPTH_PATTERNS["insights"].search(text)),
    }
    total = sum(25 for present in flags.values() if present)
    return CriterionScore(kind=ScoreKind.FLAG_SUM, value=total, details=flags)


def score_specificity(text: str) -> CriterionScore:
    """Numbers, precision words, example phrases and metrics, 25 points each."""
    text = text or ""
    flags = {
        name: bool(pattern.search(text))
        for name, pattern in SPECIFICITY_PATTERNS.items()
    }
    total = sum(25 for present in flags.values() if present)
    return CriterionScore(kind=ScoreKind.FLAG_SUM, value=total, details=flags)


def score_technical_accuracy(question_text: str, text: str) -> CriterionScore:
    """
    Coverage of the question's technical terms in the response.

    Questions without known technical terms fall back to their plain
    keywords.
    """
    terms = extract_technical_terms(question_text)
    source = "technical_terms"
    if not terms:
        terms = extract_keywords(question_text)
        source = "keywords"

    if _is_blank(text) or not terms:
        return CriterionScore.zero(
            ScoreKind.KEYWORD_OVERLAP, matched=[], total=len(terms), source=source
        )

    lowered = text.lower()
    matched = [term for term in terms if term in lowered]
    return CriterionScore(
        kind=ScoreKind.KEYWORD_OVERLAP,
        value=_ratio(len(matched), len(terms)),
        details={"matched": matched, "total": len(terms), "source": source},
    )


def score_completeness(question: Question, text: str) -> CriterionScore:
    """Share of evaluation criteria touched by the response."""
    criteria = question.evaluation_criteria
    if _is_blank(text):
        return CriterionScore.zero(ScoreKind.RATIO, covered=[], total=len(criteria))
    if not criteria:
        return CriterionScore(
            kind=ScoreKind.RATIO, value=75.0, details={"covered": [], "total": 0}
        )

    lowered = text.lower()
    covered = [
        criterion for criterion in criteria
        if any(word in lowered for word in extract_keywords(criterion))
    ]
    return CriterionScore(
        kind=ScoreKind.RATIO,
        value=_ratio(len(covered), len(criteria)),
        details={"covered": covered, "total": len(criteria)},
    )


def score_pattern_families(criterion: str, text: str) -> CriterionScore:
    """Share of a criterion's phrase families found in the text."""
    families = PATTERN_FAMILIES[criterion]
    if _is_blank(text):
        return CriterionScore.zero(ScoreKind.PATTERN_FAMILIES, hits=0, families=len(families))

    hits = sum(1 for pattern in families if pattern.search(text))
    return CriterionScore(
        kind=ScoreKind.PATTERN_FAMILIES,
        value=_ratio(hits, len(families)),
        details={"hits": hits, "families": len(families)},
    )


def score_engagement(text: str) -> CriterionScore:
    """Adequate length plus personal and enthusiasm markers."""
    text = text or ""
    families = PATTERN_FAMILIES["engagement"]
    if _is_blank(text):
        return CriterionScore.zero(ScoreKind.PATTERN_FAMILIES, hits=0, families=len(families) + 1)

    hits = int(len(text.strip()) > 100)
    hits += sum(1 for pattern in families if pattern.search(text))
    return CriterionScore(
        kind=ScoreKind.PATTERN_FAMILIES,
        value=_ratio(hits, len(families) + 1),
        details={"hits": hits, "families": len(families) + 1},
    )
