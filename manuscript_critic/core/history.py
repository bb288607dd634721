"""Score movement between successive analyses of the same scope."""

from typing import Dict, Optional

from ..models import ManuscriptAnalysis, ScoreChanges


def compute_score_changes(
    previous: Optional[ManuscriptAnalysis],
    overall_score: int,
    scores: Dict[str, int],
) -> Optional[ScoreChanges]:
    """
    Deltas of the new scores against the previous analysis.

    Only categories scored in both analyses are compared. Returns None when
    there is no previous analysis.
    """
    if previous is None:
        return None

    categories = {
        category: score - previous.scores[category]
        for category, score in scores.items()
        if category in previous.scores
    }
    return ScoreChanges(overall=overall_score - previous.overall_score, categories=categories)
