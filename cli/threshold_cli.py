import os
import sys
import logging
import argparse
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from models.errors import ThresholdError
from models.threshold_policy import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_MAX_VALUE,
    DEFAULT_OFFSET,
    DEFAULT_THRESHOLD,
)
from pipeline.threshold_demo import OUTPUT_DIR, build_demo_policies, run_threshold_demo, save_demo_results
from services.image_service import ImageService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNREADABLE = 1
EXIT_INVALID = 2


def configure_logging() -> None:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    policy_names = list(build_demo_policies())
    parser = argparse.ArgumentParser(
        prog="threshold-image",
        description="Threshold a grayscale image with fixed, adaptive or Otsu policies.",
    )
    parser.add_argument("image", type=Path, help="input image; color input is reduced to gray")
    parser.add_argument("--policy", choices=policy_names + ["all"], default="all",
                        help="policy to apply (default: all)")
    parser.add_argument("--threshold", type=int, default=DEFAULT_THRESHOLD)
    parser.add_argument("--max-value", type=int, default=DEFAULT_MAX_VALUE)
    parser.add_argument("--block-size", type=int, default=DEFAULT_BLOCK_SIZE,
                        help="adaptive neighborhood size, odd and >= 3")
    parser.add_argument("--offset", type=int, default=DEFAULT_OFFSET,
                        help="constant subtracted from the local statistic")
    parser.add_argument("--output-dir", type=Path, default=Path(OUTPUT_DIR))
    parser.add_argument("--interactive", action="store_true",
                        help="open a window with a threshold trackbar (ESC to quit)")
    return parser


def main(argv=None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    image_service = ImageService()

    try:
        image = image_service.load(args.image)
        logger.info(f"Loaded {args.image} ({image.width}x{image.height})")

        if args.interactive:
            # HighGUI is only needed here
            from pipeline.interactive_viewer import run_interactive
            final = run_interactive(image, args.threshold, args.max_value)
            logger.info(f"Interactive mode closed at threshold {final}")
            return EXIT_OK

        policies = build_demo_policies(args.threshold, args.max_value, args.block_size, args.offset)
        if args.policy != "all":
            policies = {args.policy: policies[args.policy]}

        results = run_threshold_demo(image, policies)
        save_demo_results(results, args.image.stem, image_service=image_service,
                          output_dir=args.output_dir)
    except FileNotFoundError as err:
        logger.error(str(err))
        return EXIT_UNREADABLE
    except ThresholdError as err:
        logger.error(f"Invalid input: {err}")
        return EXIT_INVALID

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
