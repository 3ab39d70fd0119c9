from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TextChunk:
    index: int
    text: str

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Chunk index must be >= 0, got {self.index}.")
        if not self.text:
            raise ValueError(f"Chunk {self.index} has empty text.")
