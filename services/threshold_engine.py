import logging
import numpy as np
from models.errors import InvalidImage, InvalidParameter
from models.image import Image
from models.threshold_policy import ThresholdPolicy, ThresholdType
from models.threshold_result import ThresholdResult
from services.local_statistics import LocalStatisticsEstimator
from services.otsu_selector import OtsuSelector
from services.pixel_mapper import PixelMapper

logger = logging.getLogger(__name__)

MAX_INTENSITY = 255


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


class ThresholdEngine:
    """
    Single entry point for thresholding a gray Image under a ThresholdPolicy.

    *   Validates the image and every parameter the policy family uses
        before touching a pixel, so callers get either a full Image or an error.
    *   Fixed policies go to PixelMapper, adaptive ones to
        LocalStatisticsEstimator, Otsu to OtsuSelector followed by the Binary rule.
    *   Holds no state between calls.
    """

    def __init__(self,
                 pixel_mapper: PixelMapper | None = None,
                 local_estimator: LocalStatisticsEstimator | None = None,
                 otsu_selector: OtsuSelector | None = None):
        self.pixel_mapper = pixel_mapper or PixelMapper()
        self.local_estimator = local_estimator or LocalStatisticsEstimator(self.pixel_mapper)
        self.otsu_selector = otsu_selector or OtsuSelector()

    # ─── Public API ────────────────────────────────────────────────
    def apply(self, image: Image, policy: ThresholdPolicy) -> Image:
        return self.run(image, policy).image

    def run(self, image: Image, policy: ThresholdPolicy) -> ThresholdResult:
        """
        Threshold `image` and report the cutoff that was applied.

        Raises:
            InvalidImage: empty, non-uint8 or multi-channel input.
            InvalidParameter: a policy value outside its domain.
        """
        pixels = self._validate_image(image)
        self._validate_policy(policy)
        logger.debug(f"Applying {policy.kind.value} to {pixels.shape[1]}x{pixels.shape[0]} image")

        if policy.is_global:
            out = self.pixel_mapper.apply(pixels, policy.threshold, policy.max_value, policy.kind)
            return ThresholdResult(Image(out), policy, threshold=int(policy.threshold))

        if policy.is_adaptive:
            out = self.local_estimator.apply(pixels, policy.block_size, policy.offset,
                                             policy.weighting, policy.max_value)
            return ThresholdResult(Image(out), policy)

        threshold, variance = self.otsu_selector.select_threshold(pixels)
        logger.info(f"Otsu's method found optimal threshold: {threshold}")
        out = self.pixel_mapper.apply(pixels, threshold, policy.max_value, ThresholdType.BINARY)
        return ThresholdResult(Image(out), policy, threshold=threshold, variance=variance)

    # ─── Validation ────────────────────────────────────────────────
    @staticmethod
    def _validate_image(image: Image) -> np.ndarray:
        pixels = getattr(image, "pixels", None)
        if not isinstance(pixels, np.ndarray):
            logger.warning("Rejected input without a pixel array")
            raise InvalidImage("Expected an Image holding a numpy pixel array")
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            pixels = pixels[:, :, 0]
        if pixels.ndim != 2:
            logger.warning(f"Rejected image with shape {pixels.shape}")
            raise InvalidImage(
                f"Expected a single-channel (H, W) image, got shape {pixels.shape}; "
                "convert to grayscale first")
        if pixels.size == 0:
            logger.warning("Rejected empty image")
            raise InvalidImage("Image is empty")
        if pixels.dtype != np.uint8:
            logger.warning(f"Rejected image with dtype {pixels.dtype}")
            raise InvalidImage(f"Expected uint8 pixels, got {pixels.dtype}")
        return pixels

    @staticmethod
    def _validate_policy(policy: ThresholdPolicy) -> None:
        if not isinstance(policy, ThresholdPolicy):
            raise InvalidParameter(f"Expected a ThresholdPolicy, got {type(policy).__name__}")

        max_value = policy.max_value
        if not _is_int(max_value) or not 0 <= max_value <= MAX_INTENSITY:
            logger.warning(f"Rejected max_value={max_value!r}")
            raise InvalidParameter(f"max_value must be an integer in [0, {MAX_INTENSITY}], got {max_value!r}")

        if policy.is_global:
            threshold = policy.threshold
            if not _is_int(threshold) or not 0 <= threshold <= max_value:
                logger.warning(f"Rejected threshold={threshold!r}")
                raise InvalidParameter(
                    f"threshold must be an integer in [0, {max_value}], got {threshold!r}")

        if policy.is_adaptive:
            block_size = policy.block_size
            if not _is_int(block_size) or block_size < 3 or block_size % 2 == 0:
                logger.warning(f"Rejected block_size={block_size!r}")
                raise InvalidParameter(f"block_size must be an odd integer >= 3, got {block_size!r}")
            if not _is_int(policy.offset):
                logger.warning(f"Rejected offset={policy.offset!r}")
                raise InvalidParameter(f"offset must be an integer, got {policy.offset!r}")
