from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import os
from dotenv import load_dotenv
from models.errors import InvalidParameter

# Load environment variables
load_dotenv()

DEFAULT_THRESHOLD = int(os.getenv("THRESHOLD_DEFAULT_VALUE", "127"))
DEFAULT_MAX_VALUE = int(os.getenv("THRESHOLD_MAX_VALUE", "255"))
DEFAULT_BLOCK_SIZE = int(os.getenv("ADAPTIVE_BLOCK_SIZE", "11"))
DEFAULT_OFFSET = int(os.getenv("ADAPTIVE_OFFSET", "2"))


class ThresholdType(str, Enum):
    BINARY = "binary"
    BINARY_INV = "binary_inv"
    TRUNC = "trunc"
    TOZERO = "tozero"
    TOZERO_INV = "tozero_inv"
    ADAPTIVE_MEAN = "adaptive_mean"
    ADAPTIVE_GAUSSIAN = "adaptive_gaussian"
    OTSU = "otsu"


class LocalWeighting(str, Enum):
    MEAN = "mean"
    GAUSSIAN = "gaussian"


GLOBAL_TYPES = (
    ThresholdType.BINARY,
    ThresholdType.BINARY_INV,
    ThresholdType.TRUNC,
    ThresholdType.TOZERO,
    ThresholdType.TOZERO_INV,
)

ADAPTIVE_WEIGHTING = {
    ThresholdType.ADAPTIVE_MEAN: LocalWeighting.MEAN,
    ThresholdType.ADAPTIVE_GAUSSIAN: LocalWeighting.GAUSSIAN,
}


@dataclass(frozen=True)
class ThresholdPolicy:
    """
    Value-object describing *how* to threshold an image.

    Every policy carries the full parameter set; each family only reads the
    fields it needs:
      * global fixed  -> threshold, max_value
      * adaptive      -> block_size, offset, max_value
      * otsu          -> max_value (threshold is selected from the histogram)
    Only the policy type is checked here; numeric domains are checked by
    ThresholdEngine so a bad value is reported where the image is processed.
    """
    kind: ThresholdType
    threshold: int = DEFAULT_THRESHOLD
    max_value: int = DEFAULT_MAX_VALUE
    block_size: int = DEFAULT_BLOCK_SIZE
    offset: int = DEFAULT_OFFSET

    def __post_init__(self):
        try:
            kind = ThresholdType(self.kind)
        except ValueError as err:
            raise InvalidParameter(f"Unknown threshold type: {self.kind!r}") from err
        object.__setattr__(self, "kind", kind)

    # ── Named constructors ───────────────────────────────────────────
    @classmethod
    def fixed(cls, kind: ThresholdType | str,
              threshold: int = DEFAULT_THRESHOLD,
              max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls(kind=kind, threshold=threshold, max_value=max_value)

    @classmethod
    def binary(cls, threshold: int = DEFAULT_THRESHOLD,
               max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls.fixed(ThresholdType.BINARY, threshold, max_value)

    @classmethod
    def binary_inv(cls, threshold: int = DEFAULT_THRESHOLD,
                   max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls.fixed(ThresholdType.BINARY_INV, threshold, max_value)

    @classmethod
    def trunc(cls, threshold: int = DEFAULT_THRESHOLD,
              max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls.fixed(ThresholdType.TRUNC, threshold, max_value)

    @classmethod
    def tozero(cls, threshold: int = DEFAULT_THRESHOLD,
               max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls.fixed(ThresholdType.TOZERO, threshold, max_value)

    @classmethod
    def tozero_inv(cls, threshold: int = DEFAULT_THRESHOLD,
                   max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls.fixed(ThresholdType.TOZERO_INV, threshold, max_value)

    @classmethod
    def adaptive(cls, weighting: LocalWeighting | str = LocalWeighting.MEAN,
                 block_size: int = DEFAULT_BLOCK_SIZE,
                 offset: int = DEFAULT_OFFSET,
                 max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        try:
            weighting = LocalWeighting(weighting)
        except ValueError as err:
            raise InvalidParameter(f"Unknown local weighting: {weighting!r}") from err
        kind = (ThresholdType.ADAPTIVE_GAUSSIAN if weighting is LocalWeighting.GAUSSIAN
                else ThresholdType.ADAPTIVE_MEAN)
        return cls(kind=kind, max_value=max_value, block_size=block_size, offset=offset)

    @classmethod
    def otsu(cls, max_value: int = DEFAULT_MAX_VALUE) -> "ThresholdPolicy":
        return cls(kind=ThresholdType.OTSU, max_value=max_value)

    # ── Family helpers ───────────────────────────────────────────────
    @property
    def is_global(self) -> bool:
        return self.kind in GLOBAL_TYPES

    @property
    def is_adaptive(self) -> bool:
        return self.kind in ADAPTIVE_WEIGHTING

    @property
    def is_otsu(self) -> bool:
        return self.kind == ThresholdType.OTSU

    @property
    def weighting(self) -> LocalWeighting | None:
        return ADAPTIVE_WEIGHTING.get(self.kind)
