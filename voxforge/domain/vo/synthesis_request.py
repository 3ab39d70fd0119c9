from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Speed(str, Enum):
    SLOW = "Slow"
    NORMAL = "Normal"
    FAST = "Fast"

    @classmethod
    def parse(cls, value: str) -> "Speed":
        normalized = value.strip().lower()
        for speed in cls:
            if speed.value.lower() == normalized:
                return speed
        choices = ", ".join(speed.value for speed in cls)
        raise ValueError(f"Unknown speed {value!r}. Expected one of: {choices}.")


@dataclass(frozen=True)
class SynthesisRequest:
    """Everything a speech client needs for one call.

    Used both as the per-batch template and as the per-chunk request; the
    orchestrator derives the latter with `for_text`.
    """

    text: str
    voice_id: str
    model_id: str
    speed: Speed = Speed.NORMAL
    temperature: float = 0.7
    system_prompt: str | None = None

    def for_text(self, text: str) -> "SynthesisRequest":
        return replace(self, text=text)
