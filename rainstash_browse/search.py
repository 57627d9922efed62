from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

SEPARATORS = frozenset({"_", " "})


@dataclass(frozen=True)
class ScoringConfig:
    adjacency_bonus: int = 5
    separator_bonus: int = 10
    camel_bonus: int = 10
    leading_letter_penalty: int = -3
    max_leading_letter_penalty: int = -9
    unmatched_letter_penalty: int = -1


DEFAULT_SCORING = ScoringConfig()


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    score: int
    matched_indices: tuple[int, ...] = ()


NO_MATCH = MatchResult(matched=False, score=0)


@dataclass(frozen=True)
class RankedName:
    name: str
    result: MatchResult


@dataclass
class _Candidate:
    char: str
    lower: str
    index: int
    score: int


def _is_lower(char: str) -> bool:
    lower = char.lower()
    return char == lower and lower != char.upper()


def _is_upper(char: str) -> bool:
    upper = char.upper()
    return char == upper and char.lower() != upper


def fuzzy_match_simple(pattern: str, document: str) -> bool:
    """Return whether ``pattern`` is a case-insensitive subsequence of ``document``."""
    if not pattern or not document:
        return False

    doc_chars = iter([char.lower() for char in document])
    return all(
        any(doc_char == pattern_char for doc_char in doc_chars)
        for pattern_char in (char.lower() for char in pattern)
    )


def fuzzy_match(
    pattern: str,
    document: str,
    *,
    config: ScoringConfig = DEFAULT_SCORING,
) -> MatchResult:
    """Score ``document`` against ``pattern`` in a single forward scan.

    Each document character that equals the sought pattern character becomes
    the held candidate. A later occurrence of the held character replaces it
    when it scores at least as well. The candidate is committed when the next
    pattern character is found, when the pattern repeats the held character,
    or when the scan ends.
    """
    if not pattern or not document:
        return NO_MATCH

    pattern_lower = [char.lower() for char in pattern]
    pattern_length = len(pattern_lower)

    score = 0
    prev_matched = False
    prev_lower = False
    # The first document character gets the separator bonus.
    prev_separator = True

    held: _Candidate | None = None
    matched_indices: list[int] = []
    pattern_idx = 0

    for doc_idx, doc_char in enumerate(document):
        doc_lower = doc_char.lower()
        sought = pattern_lower[pattern_idx]

        next_match = sought == doc_lower
        rematch = held is not None and held.lower == doc_lower
        pattern_repeat = held is not None and held.lower == sought

        if held is not None and (next_match or pattern_repeat):
            score += held.score
            matched_indices.append(held.index)
            held = None

        if next_match or rematch:
            if next_match and pattern_idx == 0:
                score += max(
                    doc_idx * config.leading_letter_penalty,
                    config.max_leading_letter_penalty,
                )

            candidate_score = 0
            if prev_matched:
                candidate_score += config.adjacency_bonus
            if prev_separator:
                candidate_score += config.separator_bonus
            if prev_lower and _is_upper(doc_char):
                candidate_score += config.camel_bonus

            if held is None or candidate_score >= held.score:
                if held is not None:
                    score += config.unmatched_letter_penalty
                held = _Candidate(
                    char=doc_char,
                    lower=doc_lower,
                    index=doc_idx,
                    score=candidate_score,
                )
            prev_matched = True

            if next_match:
                pattern_idx += 1
                if pattern_idx == pattern_length:
                    break
        else:
            score += config.unmatched_letter_penalty
            prev_matched = False

        prev_lower = _is_lower(doc_char)
        prev_separator = doc_char in SEPARATORS

    if held is not None:
        score += held.score
        matched_indices.append(held.index)

    return MatchResult(
        matched=pattern_idx == pattern_length,
        score=score,
        matched_indices=tuple(matched_indices),
    )


def rank_matches(
    query: str,
    names: Iterable[str],
    *,
    config: ScoringConfig = DEFAULT_SCORING,
) -> list[RankedName]:
    """Rank ``names`` against ``query``; higher scores come first."""
    query = query.strip()
    if not query:
        return [RankedName(name=name, result=NO_MATCH) for name in names]

    ranked: list[RankedName] = []
    for name in names:
        if not fuzzy_match_simple(query, name):
            continue
        result = fuzzy_match(query, name, config=config)
        if result.matched:
            ranked.append(RankedName(name=name, result=result))

    ranked.sort(key=lambda item: (-item.result.score, item.name))
    return ranked
