import logging
from typing import Tuple
import numpy as np

logger = logging.getLogger(__name__)

LEVELS = 256


class OtsuSelector:
    """
    Automatic global threshold (Otsu).

    For every split t the classes are [0, t] and [t+1, 255]; the selected t
    maximises w0 * w1 * (mean0 - mean1)^2, ties going to the smallest t.
    Class sizes and sums are accumulated as integers so equal splits produce
    bit-identical variances and the tie-break stays deterministic.
    """

    @staticmethod
    def histogram(pixels: np.ndarray) -> np.ndarray:
        """256-bucket intensity counts."""
        return np.bincount(pixels.ravel(), minlength=LEVELS)[:LEVELS]

    def between_class_variance(self, pixels: np.ndarray) -> np.ndarray:
        """
        Returns float64 array (256,): the between-class variance of every split.
        Splits leaving one class empty score 0.
        """
        hist = self.histogram(pixels).astype(np.int64)
        total = int(hist.sum())
        levels = np.arange(LEVELS, dtype=np.int64)

        n0 = np.cumsum(hist)
        n1 = total - n0
        s0 = np.cumsum(hist * levels)
        s1 = s0[-1] - s0

        variance = np.zeros(LEVELS, dtype=np.float64)
        valid = (n0 > 0) & (n1 > 0)
        if not valid.any():
            return variance

        w0 = n0[valid] / total
        w1 = n1[valid] / total
        mean0 = s0[valid] / n0[valid]
        mean1 = s1[valid] / n1[valid]
        variance[valid] = w0 * w1 * (mean0 - mean1) ** 2
        return variance

    def select_threshold(self, pixels: np.ndarray) -> Tuple[int, float]:
        """
        Returns (threshold, between_class_variance).
        A single-valued image has variance 0 everywhere and yields (0, 0.0).
        """
        variance = self.between_class_variance(pixels)
        # argmax returns the first maximum, i.e. the smallest t on a plateau
        threshold = int(np.argmax(variance))
        best = float(variance[threshold])
        logger.debug(f"Otsu selected threshold {threshold} (variance={best:.4f})")
        return threshold, best
