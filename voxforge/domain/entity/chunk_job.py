from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from threading import Event, Lock

import numpy as np

from voxforge.domain.vo.text_chunk import TextChunk

AudioArray = np.ndarray


class JobStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class ChunkJob:
    """Mutable synthesis state of one chunk.

    `buffer` is set iff the job is completed and `error_message` is set iff it
    failed. Terminal jobs reject further transitions.
    """

    chunk: TextChunk
    status: JobStatus = JobStatus.PENDING
    buffer: AudioArray | None = None
    error_message: str | None = None
    attempts: int = 0

    @property
    def index(self) -> int:
        return self.chunk.index

    def start(self) -> None:
        self._ensure_not_terminal("start")
        self.status = JobStatus.GENERATING

    def complete(self, buffer: AudioArray) -> None:
        self._ensure_not_terminal("complete")
        self.buffer = buffer
        self.status = JobStatus.COMPLETED

    def fail(self, message: str) -> None:
        self._ensure_not_terminal("fail")
        self.error_message = message or "Failed to generate"
        self.status = JobStatus.FAILED

    def _ensure_not_terminal(self, action: str) -> None:
        if self.status.is_terminal:
            raise RuntimeError(
                f"Cannot {action} chunk {self.index}: already {self.status.value}."
            )


@dataclass
class JobBatch:
    jobs: list[ChunkJob]

    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)
    _abandoned: Event = field(default_factory=Event, init=False, repr=False, compare=False)

    @classmethod
    def from_chunks(cls, chunks: list[TextChunk]) -> "JobBatch":
        for position, chunk in enumerate(chunks):
            if chunk.index != position:
                raise ValueError(
                    f"Chunk indices must be contiguous from 0; got {chunk.index} at position {position}."
                )
        return cls(jobs=[ChunkJob(chunk=chunk) for chunk in chunks])

    @property
    def lock(self) -> Lock:
        return self._lock

    def __len__(self) -> int:
        return len(self.jobs)

    @property
    def terminal_count(self) -> int:
        with self._lock:
            return sum(1 for job in self.jobs if job.status.is_terminal)

    @property
    def is_terminal(self) -> bool:
        return self.terminal_count == len(self.jobs)

    @property
    def progress(self) -> float:
        if not self.jobs:
            return 1.0
        return self.terminal_count / len(self.jobs)

    def buffers(self) -> list[AudioArray | None]:
        """One slot per chunk index; None where no audio was produced."""
        with self._lock:
            return [job.buffer for job in self.jobs]

    def successful_buffers(self) -> list[AudioArray]:
        return [buffer for buffer in self.buffers() if buffer is not None]

    def completed_jobs(self) -> list[ChunkJob]:
        with self._lock:
            return [job for job in self.jobs if job.status is JobStatus.COMPLETED]

    def failed_jobs(self) -> list[ChunkJob]:
        with self._lock:
            return [job for job in self.jobs if job.status is JobStatus.FAILED]

    def abandon(self) -> None:
        self._abandoned.set()

    @property
    def abandoned(self) -> bool:
        return self._abandoned.is_set()

    def wait_abandoned(self, timeout: float) -> bool:
        """Block up to `timeout` seconds; True as soon as the batch is abandoned."""
        return self._abandoned.wait(timeout)
