"""Best-match scoring for Discogs artist search candidates.

Hey future me - Discogs search mixes real artists with compilation pseudo-artists
("Various Artists feat. X") and edit/alias entries, so the top raw hit can't be
trusted blindly. We score every candidate and take the best one.

Only the relative ordering of the bonuses matters:
exact match > candidate contains query > query contains candidate
> similar length > has an image. The magnitudes themselves are arbitrary, swap in
another scorer via pick_best_candidate(scorer=...) if you need something smarter.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

EXACT_MATCH_SCORE = 100
CANDIDATE_CONTAINS_QUERY_SCORE = 50
QUERY_CONTAINS_CANDIDATE_SCORE = 30
SIMILAR_LENGTH_SCORE = 10
HAS_IMAGE_SCORE = 5

# Max difference in characters for the "not a compilation entry" length bonus.
LENGTH_TOLERANCE = 3

CandidateScorer = Callable[[str, Mapping[str, Any]], int]


def candidate_name(candidate: Mapping[str, Any]) -> str:
    """Discogs search results carry the artist name in "title"."""
    return str(candidate.get("title") or candidate.get("name") or "")


def score_artist_candidate(query: str, candidate: Mapping[str, Any]) -> int:
    """Score one search candidate against the (already cleaned) query.

    The three name tiers are exclusive, the length and image bonuses stack on top.

    Args:
        query: Cleaned artist name that was searched for
        candidate: Raw Discogs search result

    Returns:
        Integer score, higher is better
    """
    query_lower = query.lower().strip()
    name_lower = candidate_name(candidate).lower().strip()
    if not name_lower:
        return 0

    score = 0
    if name_lower == query_lower:
        score += EXACT_MATCH_SCORE
    elif query_lower and query_lower in name_lower:
        score += CANDIDATE_CONTAINS_QUERY_SCORE
    elif query_lower and name_lower in query_lower:
        score += QUERY_CONTAINS_CANDIDATE_SCORE

    if abs(len(name_lower) - len(query_lower)) <= LENGTH_TOLERANCE:
        score += SIMILAR_LENGTH_SCORE

    if candidate.get("thumb") or candidate.get("cover_image"):
        score += HAS_IMAGE_SCORE

    return score


def pick_best_candidate(
    query: str,
    candidates: Sequence[Mapping[str, Any]],
    scorer: CandidateScorer = score_artist_candidate,
) -> Mapping[str, Any] | None:
    """Return the highest scoring candidate, ties keep provider order.

    Args:
        query: Cleaned artist name
        candidates: Artist-typed search results in provider order
        scorer: Scoring function (defaults to score_artist_candidate)

    Returns:
        Best candidate or None if there are no candidates
    """
    best: Mapping[str, Any] | None = None
    best_score = -1
    for candidate in candidates:
        # Strictly greater: an equal score never displaces an earlier candidate.
        score = scorer(query, candidate)
        if score > best_score:
            best = candidate
            best_score = score
    return best
