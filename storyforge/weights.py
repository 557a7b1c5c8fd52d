"""Mood weights and the soft cap on their sum.

The backend expects the three mood axes to add up to at most 100. Whenever an
edit pushes the sum over that cap, every axis is rescaled by ``100 / total``
and rounded on its own. Rounding each axis independently means the result can
land at 99 or 101; that drift is accepted and never corrected.
"""

from __future__ import annotations

import math
from typing import Literal, get_args

from storyforge.models import MoodWeights

Axis = Literal["adventure", "romance", "nightlife"]
AXES: tuple[str, ...] = get_args(Axis)

WEIGHT_CAP = 100
MIN_WEIGHT = 0
MAX_WEIGHT = 100


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize(weights: MoodWeights) -> MoodWeights:
    """Return *weights* rescaled so the sum is (about) WEIGHT_CAP.

    Triples already at or under the cap, including all zeros, come back
    unchanged.

    (80, 80, 40) -> (40, 40, 20)
    """
    total = weights.total
    if total == 0 or total <= WEIGHT_CAP:
        return weights
    factor = WEIGHT_CAP / total
    return MoodWeights(
        adventure=_round_half_up(weights.adventure * factor),
        romance=_round_half_up(weights.romance * factor),
        nightlife=_round_half_up(weights.nightlife * factor),
    )


class WeightModel:
    """Editable mood weights, normalized after every edit."""

    def __init__(self, weights: MoodWeights | None = None) -> None:
        self._weights = normalize(weights or MoodWeights())

    @property
    def weights(self) -> MoodWeights:
        return self._weights

    def set(self, axis: str, value: int) -> MoodWeights:
        """Set one axis and return the (possibly rescaled) triple."""
        if axis not in AXES:
            raise ValueError(f"Unknown mood axis {axis!r}; expected one of {', '.join(AXES)}")
        if not MIN_WEIGHT <= value <= MAX_WEIGHT:
            raise ValueError(f"{axis} must be between {MIN_WEIGHT} and {MAX_WEIGHT}, got {value}")
        edited = self._weights.model_copy(update={axis: int(value)})
        self._weights = normalize(edited)
        return self._weights

    def reset(self) -> MoodWeights:
        self._weights = MoodWeights()
        return self._weights
