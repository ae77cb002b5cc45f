from __future__ import annotations
from dataclasses import dataclass
from models.image import Image
from models.threshold_policy import ThresholdPolicy


@dataclass(frozen=True)
class ThresholdResult:
    """
    Data object containing a thresholded Image and the cutoff that produced it.
    """
    image: Image
    policy: ThresholdPolicy
    threshold: int | None = None   # None for adaptive policies (per-pixel cutoff)
    variance: float | None = None  # Between-class variance, Otsu only
