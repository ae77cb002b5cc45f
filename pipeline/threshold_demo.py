"""
Threshold Demo Pipeline
Runs every thresholding policy over one gray image so the results can be
compared side by side: the five fixed thresholds, adaptive mean and Gaussian,
and Otsu's automatic selection.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List
from dotenv import load_dotenv

from models.image import Image
from models.threshold_policy import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_MAX_VALUE,
    DEFAULT_OFFSET,
    DEFAULT_THRESHOLD,
    LocalWeighting,
    ThresholdPolicy,
    ThresholdType,
)
from models.threshold_result import ThresholdResult
from services.image_service import ImageService
from services.threshold_engine import ThresholdEngine

# Load environment variables
load_dotenv()

OUTPUT_DIR = os.getenv("THRESHOLD_OUTPUT_DIR", "data/thresholded")
OUTPUT_EXT = ".png"  # lossless, so binary outputs stay binary on disk

logger = logging.getLogger(__name__)


def build_demo_policies(
    threshold: int = DEFAULT_THRESHOLD,
    max_value: int = DEFAULT_MAX_VALUE,
    block_size: int = DEFAULT_BLOCK_SIZE,
    offset: int = DEFAULT_OFFSET,
) -> Dict[str, ThresholdPolicy]:
    """
    Named policies in demonstration order.
    """
    policies = {
        kind.value: ThresholdPolicy.fixed(kind, threshold, max_value)
        for kind in (
            ThresholdType.BINARY,
            ThresholdType.BINARY_INV,
            ThresholdType.TRUNC,
            ThresholdType.TOZERO,
            ThresholdType.TOZERO_INV,
        )
    }
    policies[ThresholdType.ADAPTIVE_MEAN.value] = ThresholdPolicy.adaptive(
        LocalWeighting.MEAN, block_size, offset, max_value)
    policies[ThresholdType.ADAPTIVE_GAUSSIAN.value] = ThresholdPolicy.adaptive(
        LocalWeighting.GAUSSIAN, block_size, offset, max_value)
    policies[ThresholdType.OTSU.value] = ThresholdPolicy.otsu(max_value)
    return policies


def run_threshold_demo(
    image: Image,
    policies: Dict[str, ThresholdPolicy] | None = None,
    *,
    engine: ThresholdEngine = ThresholdEngine(),
) -> Dict[str, ThresholdResult]:
    """
    Apply each policy to `image`. The first invalid policy raises and no
    partial mapping is returned.

    Returns:
        Dict[str, ThresholdResult]: results keyed by policy name, in input order.
    """
    policies = policies if policies is not None else build_demo_policies()

    results: Dict[str, ThresholdResult] = {}
    for name, policy in policies.items():
        result = engine.run(image, policy)
        results[name] = result
        if result.threshold is not None:
            logger.info(f"{name:<18} threshold={result.threshold}")
        else:
            logger.info(f"{name:<18} block={policy.block_size} offset={policy.offset}")
    return results


def save_demo_results(
    results: Dict[str, ThresholdResult],
    stem: str,
    *,
    image_service: ImageService = ImageService(),
    output_dir: str | Path = OUTPUT_DIR,
    ext: str = OUTPUT_EXT,
) -> List[Path]:
    """
    Write every result as <output_dir>/<stem>_<name><ext>.
    """
    output_dir = Path(output_dir)
    written = []
    for name, result in results.items():
        path = image_service.save(result.image, output_dir / f"{stem}_{name}{ext}")
        written.append(path)
    logger.info(f"Saved {len(written)} thresholded images to {output_dir}")
    return written
