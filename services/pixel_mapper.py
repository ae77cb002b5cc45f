import numpy as np
from models.threshold_policy import ThresholdType


def _binary(src, thr, max_value):
    return np.where(src > thr, max_value, 0)


def _binary_inv(src, thr, max_value):
    return np.where(src > thr, 0, max_value)


def _trunc(src, thr, max_value):
    return np.where(src > thr, thr, src)


def _tozero(src, thr, max_value):
    return np.where(src > thr, src, 0)


def _tozero_inv(src, thr, max_value):
    return np.where(src > thr, 0, src)


class PixelMapper:
    """
    Per-pixel rules for the five fixed global thresholds.

    Every rule only looks at the pixel itself, so the same table serves the
    scalar contract (`map_value`) and the whole-array one (`apply`).
    `thr` may also be an array of the image's shape (one cutoff per pixel),
    which is how the adaptive thresholds reuse the Binary rule.
    """

    RULES = {
        ThresholdType.BINARY: _binary,
        ThresholdType.BINARY_INV: _binary_inv,
        ThresholdType.TRUNC: _trunc,
        ThresholdType.TOZERO: _tozero,
        ThresholdType.TOZERO_INV: _tozero_inv,
    }

    def map_value(self, intensity: int, threshold: int, max_value: int,
                  kind: ThresholdType) -> int:
        return int(self.RULES[ThresholdType(kind)](intensity, threshold, max_value))

    def apply(self, pixels: np.ndarray, threshold, max_value: int,
              kind: ThresholdType) -> np.ndarray:
        """
        Returns a new uint8 array with the same shape as `pixels`.
        Comparison happens in a signed integer domain so no rule can wrap.
        """
        src = pixels.astype(np.int32)
        thr = np.asarray(threshold, dtype=np.int32)
        mapped = self.RULES[ThresholdType(kind)](src, thr, int(max_value))
        return mapped.astype(np.uint8)
