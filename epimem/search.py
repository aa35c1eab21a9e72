"""
Token-based fuzzy search across breadcrumbs.

A heuristic ranker, not an IR model. Each query token is scored against an
item's primary text on a ladder (whole word 1.0, substring 0.7, ordered
subsequence 0.4); secondary text (0.6/0.4/0.2) and scope (0.3) can only
raise a token's score. Items missing some tokens are penalized twice: once
by the average, once by a coverage factor.

Example:
    >>> items = [SearchItem(id="f1", kind="finding", text="Auth uses JWT tokens")]
    >>> [r.score for r in fuzzy_search("jwt", items)]
    [1.0]
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

DEFAULT_THRESHOLD = 0.3

# Primary text ladder
WORD_SCORE = 1.0
SUBSTRING_SCORE = 0.7
FUZZY_SCORE = 0.4

# Secondary text ladder
SECONDARY_WORD_SCORE = 0.6
SECONDARY_SUBSTRING_SCORE = 0.4
SECONDARY_FUZZY_SCORE = 0.2

SCOPE_SCORE = 0.3
PARTIAL_MATCH_PENALTY = 0.5

_TOKEN_RE = re.compile(r"[^\W_]+")


@dataclass(frozen=True)
class SearchItem:
    """
    One searchable breadcrumb.

    Attributes:
        id: Record id
        kind: "finding", "unknown" or "dead_end"
        text: Primary text (finding, question, approach)
        secondary_text: Secondary text (why a dead end failed)
        scope: Subject path or topic
    """

    id: str
    kind: str
    text: str
    secondary_text: str = ""
    scope: str = ""


@dataclass
class SearchResult:
    id: str
    kind: str
    text: str
    score: float
    secondary_text: str = ""
    scope: str = ""
    highlights: list[int] = field(default_factory=list)  # char indices in text


def tokenize(text: str) -> list[str]:
    """Lower-cased runs of letters and digits."""
    return _TOKEN_RE.findall(text.lower())


def fold_case(text: str) -> str:
    """Lower-case `text` one character at a time, keeping its length unchanged."""
    return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)


def _is_word_char(ch: str) -> bool:
    return ch.isalnum()


def find_word(text: str, word: str) -> int:
    """Index of the first whole-word occurrence of `word` in `text`, or -1."""
    if not word:
        return -1
    idx = text.find(word)
    while idx != -1:
        end = idx + len(word)
        before_ok = idx == 0 or not _is_word_char(text[idx - 1])
        after_ok = end >= len(text) or not _is_word_char(text[end])
        if before_ok and after_ok:
            return idx
        idx = text.find(word, idx + 1)
    return -1


def contains_word(text: str, word: str) -> bool:
    return find_word(text, word) != -1


def fuzzy_contains(text: str, pattern: str) -> bool:
    """
    Whether `pattern` appears in `text` as an ordered subsequence.

    Gaps are counted only after the first matched character and reset on
    every match; more than len(pattern) consecutive misses fails the match.
    """
    if not pattern:
        return True
    if not text:
        return False

    pos = 0
    gaps = 0
    max_gaps = len(pattern)
    for ch in text:
        if pos == len(pattern):
            break
        if ch == pattern[pos]:
            pos += 1
            gaps = 0
        elif pos > 0:
            gaps += 1
            if gaps > max_gaps:
                return False
    return pos == len(pattern)


def score_token(token: str, text: str, secondary: str = "", scope: str = "") -> tuple[float, list[int]]:
    """
    Score one lower-cased token against lower-cased item fields.

    Returns:
        (score, highlight indices into `text`)
    """
    score = 0.0
    highlights: list[int] = []

    idx = find_word(text, token)
    if idx != -1:
        score = WORD_SCORE
    else:
        idx = text.find(token)
        if idx != -1:
            score = SUBSTRING_SCORE
        elif fuzzy_contains(text, token):
            score = FUZZY_SCORE
    if idx != -1:
        highlights = list(range(idx, idx + len(token)))

    if secondary:
        if contains_word(secondary, token):
            score = max(score, SECONDARY_WORD_SCORE)
        elif token in secondary:
            score = max(score, SECONDARY_SUBSTRING_SCORE)
        elif fuzzy_contains(secondary, token):
            score = max(score, SECONDARY_FUZZY_SCORE)

    if scope and token in scope:
        score = max(score, SCOPE_SCORE)

    return score, highlights


def score_item(tokens: Sequence[str], item: SearchItem) -> tuple[float, list[int]]:
    if not tokens:
        return 0.0, []

    # same length as item.text; highlights index into it
    text = fold_case(item.text)
    secondary = item.secondary_text.lower()
    scope = item.scope.lower()

    total = 0.0
    matched = 0
    highlights: list[int] = []
    for token in tokens:
        token_score, token_highlights = score_token(token, text, secondary, scope)
        if token_score > 0:
            matched += 1
            total += token_score
            highlights.extend(token_highlights)

    if matched < len(tokens):
        total *= matched / len(tokens) * PARTIAL_MATCH_PENALTY

    return total / len(tokens), highlights


def fuzzy_search(
    query: str,
    items: Sequence[SearchItem],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[SearchResult]:
    """
    Rank items against a free-text query.

    Args:
        query: Free text; tokenized into alphanumeric runs
        items: Candidates, in the order ties should keep
        threshold: Minimum score to keep

    Returns:
        Results scoring at least `threshold`, best first
    """
    if not query or not query.strip():
        return []

    tokens = tokenize(query)
    if not tokens:
        return []

    results = []
    for item in items:
        score, highlights = score_item(tokens, item)
        if score >= threshold:
            results.append(
                SearchResult(
                    id=item.id,
                    kind=item.kind,
                    text=item.text,
                    score=score,
                    secondary_text=item.secondary_text,
                    scope=item.scope,
                    highlights=highlights,
                )
            )

    # sort is stable, so ties keep input order
    results.sort(key=lambda r: r.score, reverse=True)
    return results
