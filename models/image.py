from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass(frozen=True, eq=False)
class Image:
    """
    Simple data object: single-channel intensity pixels (+ optional source path
    for bookkeeping). The pixel buffer is copied and frozen on construction,
    so every operation has to build a new Image instead of editing this one.
    """
    pixels: np.ndarray # Shape (H, W), dtype uint8.
    path: Path | None = None # Source of the image.

    def __post_init__(self):
        frozen = np.array(self.pixels, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "pixels", frozen)
        if self.path is not None:
            object.__setattr__(self, "path", Path(self.path))

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])
