"""
Interactive Threshold Viewer
OpenCV HighGUI front-end for InteractiveSession: a "Threshold" trackbar feeds
parameter changes, ESC cancels. Rendering lives here, computation does not.
"""

import logging
import os
import cv2
import numpy as np
from dotenv import load_dotenv

from models.image import Image
from models.threshold_policy import DEFAULT_MAX_VALUE, DEFAULT_THRESHOLD
from services.interactive_session import InteractiveSession

# Load environment variables
load_dotenv()

WINDOW_NAME = os.getenv("INTERACTIVE_WINDOW_NAME", "Interactive Thresholding")
POLL_MS = int(os.getenv("INTERACTIVE_POLL_MS", "100"))
TRACKBAR_NAME = "Threshold"
ESC_KEY = 27
LABEL_COLOR = (0, 255, 0)  # BGR green

logger = logging.getLogger(__name__)


def annotate(image: Image, threshold: int) -> np.ndarray:
    """
    BGR copy of `image` with the current threshold written in the corner.
    """
    display = cv2.cvtColor(np.ascontiguousarray(image.pixels), cv2.COLOR_GRAY2BGR)
    cv2.putText(display, f"Threshold: {threshold}", (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX, 1, LABEL_COLOR, 2)
    return display


def _window_visible(window_name: str) -> bool:
    # closing from the title bar drops the property below 1
    return cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) >= 1


def run_interactive(
    image: Image,
    initial_threshold: int = DEFAULT_THRESHOLD,
    max_value: int = DEFAULT_MAX_VALUE,
    *,
    window_name: str = WINDOW_NAME,
    poll_ms: int = POLL_MS,
) -> int:
    """
    Block until the user presses ESC or closes the window.
    Returns the last threshold shown.
    """
    cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)

    def show(output: Image, threshold: int) -> None:
        cv2.imshow(window_name, annotate(output, threshold))

    session = None
    try:
        session = InteractiveSession(image, initial_threshold, max_value, on_output=show)
        cv2.createTrackbar(TRACKBAR_NAME, window_name, session.threshold, max_value,
                           session.on_threshold_changed)
        logger.info("Use the trackbar to adjust the threshold, press ESC to exit")

        while session.is_running:
            key = cv2.waitKey(poll_ms) & 0xFF
            if key == ESC_KEY or not _window_visible(window_name):
                session.cancel()
    finally:
        if session is not None:
            session.cancel()
        cv2.destroyWindow(window_name)

    return session.threshold
