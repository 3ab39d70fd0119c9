from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from voxforge.domain.vo.synthesis_request import Speed, SynthesisRequest
from voxforge.domain.vo.voice import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_VOICE,
    DEFAULT_SPEED,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
)

MIN_CHUNK_SIZE = 500
MAX_CHUNK_SIZE = 15_000
DEFAULT_CHUNK_SIZE = 3000
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


class EmptyBatchPolicy(str, Enum):
    """What to do when every chunk of a batch failed."""

    SOFT = "soft"  # return an empty result flagged `is_empty`
    FAIL = "fail"  # raise EmptyBatchError carrying the result


@dataclass(frozen=True)
class GenerationSettings:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    merge_output: bool = True
    voice_id: str = DEFAULT_GEMINI_VOICE
    model_id: str = DEFAULT_GEMINI_MODEL
    speed: Speed = DEFAULT_SPEED
    temperature: float = DEFAULT_TEMPERATURE
    system_prompt: str | None = DEFAULT_SYSTEM_PROMPT
    concurrency_limit: int = 3
    max_retries: int = 3
    empty_batch_policy: EmptyBatchPolicy = EmptyBatchPolicy.SOFT

    def __post_init__(self) -> None:
        if not MIN_CHUNK_SIZE <= self.chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(
                f"chunk_size must be between {MIN_CHUNK_SIZE} and {MAX_CHUNK_SIZE}, got {self.chunk_size}."
            )
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}, got {self.temperature}."
            )
        if self.concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be >= 1, got {self.concurrency_limit}.")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}.")

    def request_template(self) -> SynthesisRequest:
        return SynthesisRequest(
            text="",
            voice_id=self.voice_id,
            model_id=self.model_id,
            speed=self.speed,
            temperature=self.temperature,
            system_prompt=self.system_prompt,
        )
