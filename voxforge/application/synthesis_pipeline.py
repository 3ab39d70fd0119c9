from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

import numpy as np

from voxforge.application.chunk_orchestrator import ChunkOrchestrator
from voxforge.application.errors import (
    BatchAbandonedError,
    EmptyBatchError,
    MergeError,
    MissingCredentialsError,
)
from voxforge.application.port.speech_client import SpeechClient
from voxforge.application.text_segmenter import segment
from voxforge.audio.buffer_merger import merge_buffers
from voxforge.audio.pcm_codec import SAMPLE_RATE, duration_seconds, encode_wav
from voxforge.domain.entity.chunk_job import ChunkJob, JobBatch
from voxforge.domain.vo.generation_settings import EmptyBatchPolicy, GenerationSettings
from voxforge.utils.logger import Logger


@dataclass(frozen=True)
class AudioArtifact:
    """One encoded WAV file. `chunk_index` is None for the merged output."""

    chunk_index: int | None
    label: str
    wav_bytes: bytes
    sample_count: int
    sample_rate: int = SAMPLE_RATE

    @property
    def is_merged(self) -> bool:
        return self.chunk_index is None

    @property
    def duration_seconds(self) -> float:
        return duration_seconds(self.sample_count, self.sample_rate)


@dataclass
class BatchResult:
    batch: JobBatch
    artifacts: list[AudioArtifact] = field(default_factory=list)
    merged: bool = False
    merge_error: str | None = None

    @property
    def jobs(self) -> list[ChunkJob]:
        return self.batch.jobs

    @property
    def completed_count(self) -> int:
        return len(self.batch.completed_jobs())

    @property
    def failed_jobs(self) -> list[ChunkJob]:
        return self.batch.failed_jobs()

    @property
    def is_empty(self) -> bool:
        return not self.artifacts


class SynthesisPipeline:
    """Text in, WAV artifacts out: segment, synthesize, then merge or split."""

    def __init__(
        self,
        speech_client: SpeechClient,
        *,
        logger: Logger | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.speech_client = speech_client
        self.logger = logger
        self._sleep = sleep

        # Optional hooks for UI/observers.
        self.on_progress: Callable[[float], None] | None = None
        self.on_job_update: Callable[[ChunkJob], None] | None = None

        self._lock = Lock()
        self._orchestrator: ChunkOrchestrator | None = None

    def generate(self, text: str, settings: GenerationSettings) -> BatchResult:
        # Credentials are checked once per batch, before any chunk is dispatched.
        if not self.speech_client.is_configured():
            raise MissingCredentialsError(
                "Speech provider API key is missing or still a placeholder."
            )

        chunks = segment(text, settings.chunk_size)
        self._log(f"Split input ({len(text)} chars) into {len(chunks)} chunks.")

        orchestrator = ChunkOrchestrator(
            self.speech_client,
            concurrency_limit=settings.concurrency_limit,
            max_retries=settings.max_retries,
            logger=self.logger,
            sleep=self._sleep,
        )
        orchestrator.on_progress = self.on_progress
        orchestrator.on_job_update = self.on_job_update

        with self._lock:
            self._orchestrator = orchestrator
        try:
            batch = orchestrator.run(chunks, settings.request_template())
        finally:
            with self._lock:
                self._orchestrator = None

        if batch.abandoned:
            raise BatchAbandonedError("Batch was abandoned before all chunks finished.")

        result = self._assemble(batch, merge_output=settings.merge_output)

        if chunks and result.completed_count == 0:
            message = f"No audio was produced: all {len(chunks)} chunks failed."
            self._log(message)
            if settings.empty_batch_policy is EmptyBatchPolicy.FAIL:
                raise EmptyBatchError(message, result)

        return result

    def abandon(self) -> None:
        with self._lock:
            orchestrator = self._orchestrator
        if orchestrator is not None:
            orchestrator.abandon()

    def _assemble(self, batch: JobBatch, *, merge_output: bool) -> BatchResult:
        slots = batch.buffers()
        successful = [buffer for buffer in slots if buffer is not None]
        self._log(f"Collected {len(successful)} of {len(slots)} chunk buffers.")

        if not successful:
            return BatchResult(batch=batch)

        if not merge_output:
            return BatchResult(batch=batch, artifacts=self._per_chunk_artifacts(slots))

        try:
            merged = merge_buffers(successful)
            self._log(f"Merged buffer size: {len(merged)} samples")
            artifact = AudioArtifact(
                chunk_index=None,
                label=f"Full Merged Audio ({len(successful)} chunks)",
                wav_bytes=encode_wav(merged),
                sample_count=len(merged),
            )
        except (MergeError, MemoryError) as e:
            # Keep individual chunks if merge fails.
            self._log(f"Merge failed, delivering individual chunks: {e}")
            return BatchResult(
                batch=batch,
                artifacts=self._per_chunk_artifacts(slots),
                merge_error=str(e),
            )

        self._log(f"Final WAV size: {len(artifact.wav_bytes)} bytes")
        return BatchResult(batch=batch, artifacts=[artifact], merged=True)

    def _per_chunk_artifacts(self, slots: list[np.ndarray | None]) -> list[AudioArtifact]:
        return [
            AudioArtifact(
                chunk_index=index,
                label=f"Chunk {index + 1}",
                wav_bytes=encode_wav(buffer),
                sample_count=len(buffer),
            )
            for index, buffer in enumerate(slots)
            if buffer is not None
        ]

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log(message)
