from pathlib import Path
from typing import Iterable, Union, Iterator
import logging
import cv2
import numpy as np
from models.errors import InvalidImage
from models.image import Image
from repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers and gray reduction. No thresholding logic."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk as a single-channel Image."""
        pixels = self.image_repository.read_pixels(path)
        return self.create_image(self.to_grayscale(pixels), path)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield gray images lazily instead of returning a gigantic list.
        Unreadable files are logged and skipped.
        """
        for path in self.image_repository.iter_dir(folder, recursive=recursive, exts=exts):
            try:
                yield self.load(path)
            except (FileNotFoundError, InvalidImage) as err:
                logger.warning(f"Skipping {path.name}: {err}")

    @staticmethod
    def to_grayscale(pixels: np.ndarray) -> np.ndarray:
        """
        Reduce BGR / BGRA pixels to one channel; gray input is returned as is.
        """
        if pixels.ndim == 2:
            return pixels
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            return pixels[:, :, 0]
        if pixels.ndim == 3 and pixels.shape[2] == 3:
            logger.info("Converted color image to grayscale for thresholding")
            return cv2.cvtColor(pixels, cv2.COLOR_BGR2GRAY)
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            logger.info("Converted color image to grayscale for thresholding")
            return cv2.cvtColor(pixels, cv2.COLOR_BGRA2GRAY)
        raise InvalidImage(f"Unsupported pixel layout {pixels.shape}")

    def save(self, image: Image, path: Union[str, Path, None] = None) -> Path:
        """
        Business-level method to save the image, to `path` or to its own path.
        """
        return self.image_repository.save(image, path)

    def get_image_dimensions(self, img: Image):
        return self.image_repository.retrieve_image_dimensions(img)
