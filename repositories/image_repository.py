from pathlib import Path
from typing import Union, Iterable, Iterator
import logging
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv
import os
from models.errors import InvalidImage
from models.image import Image

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O for Image entities. No thresholding logic here.
    """
    def __init__(self):
        # Load as set
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".png,.jpg,.jpeg,.bmp,.tif,.tiff")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    def retrieve_image_dimensions(self, img: Image):
        return img.pixels.shape[:2]

    @staticmethod
    def read_pixels(path: Union[str, Path]) -> np.ndarray:
        """
        Raw pixels as stored on disk: (H, W) gray or (H, W, 3|4) BGR(A).
        """
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        if arr.dtype == np.uint16:
            # 16-bit sources are scaled down to the 8-bit range
            arr = cv2.convertScaleAbs(arr, alpha=255.0 / max(float(arr.max()), 1.0))
        elif arr.dtype != np.uint8:
            raise InvalidImage(f"Unsupported sample type {arr.dtype} in {path}")
        return arr

    @staticmethod
    def save(image: Image, path: Union[str, Path, None] = None) -> Path:
        target = Path(path) if path is not None else image.path
        if target is None:
            raise ValueError("Image has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(target)
        logger.debug(f"Saved {image.pixels.shape[1]}x{image.pixels.shape[0]} image to {target}")
        return target

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield image paths one at a time, sorted for stable ordering.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            yield p
