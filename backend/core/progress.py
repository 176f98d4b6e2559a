"""
Progress events — observer interface for status updates during a generation.

Listeners are called synchronously and in subscription order, so every event
is delivered before the caller moves on to its next network call.
"""
import logging
from typing import Callable, Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ProgressStage = Literal["start", "sampling", "generating", "finalizing", "executing"]


class ProgressEvent(BaseModel):
    stage: ProgressStage
    message: str


ProgressListener = Callable[[ProgressEvent], None]


class ProgressEmitter:
    def __init__(self):
        self._listeners: list[ProgressListener] = []
        self.history: list[ProgressEvent] = []

    def subscribe(self, listener: ProgressListener) -> "ProgressEmitter":
        self._listeners.append(listener)
        return self

    def emit(self, stage: ProgressStage, message: str) -> None:
        event = ProgressEvent(stage=stage, message=message)
        self.history.append(event)
        logger.debug("progress[%s] %s", stage, message)
        for listener in self._listeners:
            listener(event)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.history]
