from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict


class StreamEvent(BaseModel):
    """One non-empty increment decoded from the upstream stream.

    `reasoning` deltas are the model's intermediate "thinking" text and are
    forwarded to the caller's progress callback. `content` deltas make up the
    final answer handed to the extractor.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["reasoning", "content"]
    delta: str


class GenerationState(str, Enum):
    IDLE = "idle"
    COMPOSING = "composing"
    DISPATCHING = "dispatching"
    STREAMING = "streaming"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"
