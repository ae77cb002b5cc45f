class ThresholdError(ValueError):
    """Base class for errors raised by the thresholding core."""


class InvalidImage(ThresholdError):
    """The image is empty, not uint8, or has more than one channel."""


class InvalidParameter(ThresholdError):
    """A policy parameter is outside its declared domain."""
