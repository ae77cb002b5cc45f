from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from models.errors import InvalidParameter
from models.image import Image
from models.session_state import SessionState, SessionStatus
from models.threshold_policy import DEFAULT_MAX_VALUE, DEFAULT_THRESHOLD, ThresholdPolicy
from services.threshold_engine import ThresholdEngine

logger = logging.getLogger(__name__)

OutputListener = Callable[[Image, int], None]


class InteractiveSession:
    """
    Live Binary thresholding driven by external events.

    *   `on_threshold_changed` is the only path that mutates the state. Values
        coming from a slider are clamped into [0, max_value] instead of rejected.
    *   `cancel` terminates the session and releases the images; any event
        delivered afterwards is ignored.
    *   Each new output is handed to `on_output(image, threshold)` for display.

    Not thread-safe: events must be delivered one at a time.
    """

    def __init__(self,
                 source: Image,
                 initial_threshold: int = DEFAULT_THRESHOLD,
                 max_value: int = DEFAULT_MAX_VALUE,
                 engine: ThresholdEngine | None = None,
                 on_output: Optional[OutputListener] = None):
        self.engine = engine or ThresholdEngine()
        self.max_value = max_value
        self.on_output = on_output

        # The first output is computed with strict validation.
        first = self.engine.apply(source, ThresholdPolicy.binary(initial_threshold, max_value))
        self.state = SessionState(threshold=initial_threshold, source=source, output=first)
        logger.info(f"Interactive session started at threshold {initial_threshold}")
        self._publish()

    # ─── State accessors ───────────────────────────────────────────
    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def is_running(self) -> bool:
        return self.state.running

    @property
    def threshold(self) -> int:
        return self.state.threshold

    @property
    def output(self) -> Image | None:
        return self.state.output

    # ─── Events ────────────────────────────────────────────────────
    def on_threshold_changed(self, value) -> Image | None:
        """
        Recompute for a new slider value. Returns the new output, or None
        once the session is terminated.
        """
        if not self.state.running:
            logger.debug(f"Ignoring threshold {value!r}: session terminated")
            return None

        try:
            requested = float(value)
        except OverflowError:
            requested = math.inf if value > 0 else -math.inf
        except (TypeError, ValueError) as err:
            raise InvalidParameter(f"Threshold must be numeric, got {value!r}") from err
        if math.isnan(requested):
            raise InvalidParameter("Threshold must be numeric, got nan")

        # clamp in float: +/-inf saturate to the bounds
        threshold = int(min(max(requested, 0), self.max_value))
        if not 0 <= requested <= self.max_value:
            logger.debug(f"Clamped threshold {value!r} -> {threshold}")

        output = self.engine.apply(self.state.source, ThresholdPolicy.binary(threshold, self.max_value))
        self.state.threshold = threshold
        self.state.output = output
        self._publish()
        return output

    def cancel(self) -> None:
        if not self.state.running:
            return
        self.state.running = False
        self.state.source = None
        self.state.output = None
        logger.info(f"Interactive session terminated at threshold {self.state.threshold}")

    # ─── Internal helpers ──────────────────────────────────────────
    def _publish(self) -> None:
        if self.on_output is not None:
            self.on_output(self.state.output, self.state.threshold)
