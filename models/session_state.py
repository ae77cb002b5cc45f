from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from models.image import Image


class SessionStatus(str, Enum):
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass
class SessionState:
    """
    Mutable state of one interactive thresholding session.
    Only InteractiveSession writes to it.
    """
    threshold: int
    source: Image | None        # Read-only input, released on termination.
    output: Image | None = None # Last computed output.
    running: bool = True

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.RUNNING if self.running else SessionStatus.TERMINATED
