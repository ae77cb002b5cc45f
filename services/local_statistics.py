import logging
import cv2
import numpy as np
from models.errors import InvalidParameter
from models.threshold_policy import LocalWeighting, ThresholdType
from services.pixel_mapper import PixelMapper

logger = logging.getLogger(__name__)


class LocalStatisticsEstimator:
    """
    Adaptive (per-pixel) thresholding.

    • Local statistic over a block_size x block_size window, borders replicated.
    • MEAN: plain box average. GAUSSIAN: separable Gaussian, OpenCV default sigma.
    • Statistic is rounded, the offset subtracted, the result clamped to [0, 255].
    • Output follows the Binary rule against that per-pixel cutoff.
    """

    def __init__(self, pixel_mapper: PixelMapper | None = None) -> None:
        self.pixel_mapper = pixel_mapper or PixelMapper()

    # ---------- private helpers ----------
    @staticmethod
    def _check_block_size(block_size) -> int:
        if isinstance(block_size, bool) or not isinstance(block_size, (int, np.integer)):
            raise InvalidParameter(f"block_size must be an integer, got {block_size!r}")
        if block_size < 3 or block_size % 2 == 0:
            raise InvalidParameter(f"block_size must be odd and >= 3, got {block_size}")
        return int(block_size)

    @staticmethod
    def _local_statistic(src: np.ndarray, block_size: int,
                         weighting: LocalWeighting) -> np.ndarray:
        if weighting is LocalWeighting.MEAN:
            return cv2.boxFilter(src, -1, (block_size, block_size),
                                 normalize=True, borderType=cv2.BORDER_REPLICATE)

        kernel = cv2.getGaussianKernel(block_size, -1, cv2.CV_64F)
        return cv2.sepFilter2D(src, -1, kernel, kernel,
                               borderType=cv2.BORDER_REPLICATE)

    # ---------- public API ----------
    def threshold_map(self, pixels: np.ndarray, block_size: int, offset: int,
                      weighting: LocalWeighting | str = LocalWeighting.MEAN) -> np.ndarray:
        """
        Returns uint8 map (H, W): the cutoff each pixel is compared against.
        """
        block_size = self._check_block_size(block_size)
        weighting = LocalWeighting(weighting)

        src = pixels.astype(np.float64)
        stat = np.rint(self._local_statistic(src, block_size, weighting))
        local = np.clip(stat - int(offset), 0, 255)
        return local.astype(np.uint8)

    def apply(self, pixels: np.ndarray, block_size: int, offset: int,
              weighting: LocalWeighting | str = LocalWeighting.MEAN,
              max_value: int = 255) -> np.ndarray:
        cutoffs = self.threshold_map(pixels, block_size, offset, weighting)
        logger.debug(f"Adaptive {LocalWeighting(weighting).value} threshold: "
                     f"block={block_size} offset={offset}")
        return self.pixel_mapper.apply(pixels, cutoffs, max_value, ThresholdType.BINARY)
