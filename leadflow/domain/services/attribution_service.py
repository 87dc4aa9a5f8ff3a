"""
Attribution Calculator
Splits conversion credit across a lead's marketing touchpoints
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from leadflow.domain.models.touchpoint import AttributionModel, SourceWeight, Touchpoint
from leadflow.utils.time_utils import timestamp_or_epoch

logger = logging.getLogger(__name__)

# U-shaped split: first and last touch each get 40%, the middle shares 20%
U_SHAPED_ENDPOINT_WEIGHT = 0.4
U_SHAPED_MIDDLE_WEIGHT = 0.2


class AttributionCalculator:
    """
    Computes per-source weights for the supported attribution models.

    Touchpoints are ordered by created_at (missing timestamps first), then
    the model assigns a weight per touchpoint, and weights are summed per
    source. Weights always total 1.0 for non-empty input.
    """

    def _touch_weights(
        self,
        ordered: Sequence[Touchpoint],
        model: AttributionModel
    ) -> List[Tuple[str, float]]:
        count = len(ordered)
        first, last = ordered[0], ordered[-1]

        if model == AttributionModel.FIRST_TOUCH:
            return [(first.source_label, 1.0)]

        if model == AttributionModel.LAST_TOUCH:
            return [(last.source_label, 1.0)]

        if model == AttributionModel.LINEAR:
            weight = 1.0 / count
            return [(tp.source_label, weight) for tp in ordered]

        if model == AttributionModel.U_SHAPED:
            if count == 1:
                return [(first.source_label, 1.0)]
            if count == 2:
                # 40/40/20 has no middle to absorb the 20%: split evenly
                return [(first.source_label, 0.5), (last.source_label, 0.5)]
            middle_weight = U_SHAPED_MIDDLE_WEIGHT / (count - 2)
            weights = [(first.source_label, U_SHAPED_ENDPOINT_WEIGHT)]
            weights.extend((tp.source_label, middle_weight) for tp in ordered[1:-1])
            weights.append((last.source_label, U_SHAPED_ENDPOINT_WEIGHT))
            return weights

        raise ValueError(f"Unsupported attribution model: {model}")

    def calculate_attribution(
        self,
        touchpoints: Optional[Sequence[Touchpoint]],
        model: Union[AttributionModel, str] = AttributionModel.LAST_TOUCH
    ) -> List[SourceWeight]:
        """
        Calculate attribution weights for a lead's touchpoints.

        Args:
            touchpoints: Touchpoints in any order
            model: Attribution model (default: LAST_TOUCH)

        Returns:
            Weights aggregated by source, highest first (empty for no touchpoints)
        """
        if not touchpoints:
            return []

        model = AttributionModel(model)
        ordered = sorted(touchpoints, key=lambda tp: timestamp_or_epoch(tp.created_at))

        aggregated: Dict[str, float] = {}
        for source, weight in self._touch_weights(ordered, model):
            aggregated[source] = aggregated.get(source, 0.0) + weight

        results = [SourceWeight(source=s, weight=w) for s, w in aggregated.items()]
        results.sort(key=lambda r: r.weight, reverse=True)

        logger.debug(
            f"{model.value} attribution over {len(ordered)} touchpoints: "
            f"{[(r.source, round(r.weight, 3)) for r in results]}",
            extra={"model": model.value, "touchpoints": len(ordered)}
        )
        return results


# Global singleton instance
_calculator: Optional[AttributionCalculator] = None


def get_attribution_calculator() -> AttributionCalculator:
    """Get the global attribution calculator instance."""
    global _calculator
    if _calculator is None:
        _calculator = AttributionCalculator()
    return _calculator
