"""
Message schemas for the hint controller.
Everything crossing a thread boundary into the controller is one of these.
"""

from typing import List, Literal, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .coordinates import ScreenPoint


class EventType(str, Enum):
    """Kinds of controller messages."""
    TRIGGER = "trigger"
    KEY = "key"
    DETECTION_FINISHED = "detection_finished"
    DISPATCH_FINISHED = "dispatch_finished"
    RESET = "reset"


class Hint(BaseModel):
    """A letter bound to one badge while hint mode is active."""
    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1, max_length=1, description="Single lowercase letter")
    point: ScreenPoint = Field(description="Where the badge is on screen")


class TriggerEvent(BaseModel):
    """The hint hotkey was pressed."""
    event_type: Literal[EventType.TRIGGER] = EventType.TRIGGER


class KeyEvent(BaseModel):
    """A key pressed while hints are showing."""
    event_type: Literal[EventType.KEY] = EventType.KEY
    key: str = Field(description="Letter a-z, 'escape', or 'other'")


class DetectionFinished(BaseModel):
    """A background detection completed."""
    event_type: Literal[EventType.DETECTION_FINISHED] = EventType.DETECTION_FINISHED
    request_id: int
    points: List[ScreenPoint] = Field(default_factory=list)
    error: Optional[str] = None


class DispatchFinished(BaseModel):
    """A simulated click completed."""
    event_type: Literal[EventType.DISPATCH_FINISHED] = EventType.DISPATCH_FINISHED
    request_id: int
    label: str
    success: bool = True
    message: str = ""


class ResetEvent(BaseModel):
    """Force the controller back to idle (hook failure, shutdown)."""
    event_type: Literal[EventType.RESET] = EventType.RESET
    reason: str = ""


ControllerEvent = Union[
    TriggerEvent,
    KeyEvent,
    DetectionFinished,
    DispatchFinished,
    ResetEvent,
]
