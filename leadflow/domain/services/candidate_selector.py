"""
Candidate Selector
Picks the user who receives a lead at assignment time
"""
import logging
from typing import Optional, Sequence, Union

from leadflow.domain.models.assignment import Candidate, DistributionMode

logger = logging.getLogger(__name__)


class CandidateSelector:
    """
    Load-balances lead assignment across candidate users.

    LOAD_BALANCED and ROUND_ROBIN behave identically here: both pick the
    lowest load_score. They differ only in what the caller measures as load
    (active leads vs. today's assignments). SKILL_BASED is not implemented
    yet and returns the first candidate as given.
    """

    def get_best_candidate(
        self,
        candidates: Sequence[Candidate],
        mode: Union[DistributionMode, str] = DistributionMode.LOAD_BALANCED
    ) -> Optional[str]:
        """
        Select the user to assign.

        Args:
            candidates: Eligible users with their load
            mode: Distribution strategy

        Returns:
            user_id of the chosen candidate, or None when there are no
            candidates (callers leave the lead unassigned)
        """
        mode = DistributionMode(mode)

        if not candidates:
            logger.warning(
                f"No eligible candidate for {mode.value} assignment",
                extra={"mode": mode.value}
            )
            return None

        if mode in (DistributionMode.LOAD_BALANCED, DistributionMode.ROUND_ROBIN):
            # Ties go to the earliest candidate
            chosen = min(candidates, key=lambda c: c.load_score)
        else:
            chosen = candidates[0]

        logger.debug(
            f"{mode.value} selected {chosen.user_id} (load {chosen.load_score}) "
            f"among {len(candidates)} candidates",
            extra={"mode": mode.value, "user_id": chosen.user_id}
        )
        return chosen.user_id


# Global singleton instance
_selector: Optional[CandidateSelector] = None


def get_candidate_selector() -> CandidateSelector:
    """Get the global candidate selector instance."""
    global _selector
    if _selector is None:
        _selector = CandidateSelector()
    return _selector
