from __future__ import annotations

from collections import deque
from collections.abc import Callable, Sequence
from queue import Queue
from threading import Lock, Thread

import numpy as np

from voxforge.application.errors import (
    SynthesisError,
    SynthesisRateLimited,
    classify_error,
)
from voxforge.application.port.speech_client import SpeechClient
from voxforge.domain.entity.chunk_job import ChunkJob, JobBatch
from voxforge.domain.vo.synthesis_request import SynthesisRequest
from voxforge.domain.vo.text_chunk import TextChunk
from voxforge.utils.logger import Logger
from voxforge.utils.text import preview

DEFAULT_CONCURRENCY_LIMIT = 3
DEFAULT_MAX_RETRIES = 3
BACKOFF_BASE_SECONDS = 2.0

# Sentinel pushed onto the completion queue by abandon().
_ABANDONED = -1


def backoff_delay(attempt: int, *, base_seconds: float = BACKOFF_BASE_SECONDS) -> float:
    """Delay before retry number `attempt` (0-based): 2s, 4s, 8s, ... uncapped."""
    return (2**attempt) * base_seconds


class ChunkOrchestrator:
    """Drive a speech client over a batch of chunks with bounded parallelism.

    A single scheduler loop (the caller's thread) admits jobs while fewer than
    `concurrency_limit` workers are in flight, then blocks on a completion
    queue until one finishes. Workers only ever write their own job, under
    the batch lock, so results land in index-keyed slots regardless of the
    order in which calls return.
    """

    def __init__(
        self,
        speech_client: SpeechClient,
        *,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        logger: Logger | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be >= 1, got {concurrency_limit}.")
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}.")

        self.speech_client = speech_client
        self.concurrency_limit = concurrency_limit
        self.max_retries = max_retries
        self.logger = logger
        self._sleep = sleep

        # Optional hooks for UI/observers.
        self.on_progress: Callable[[float], None] | None = None
        self.on_job_update: Callable[[ChunkJob], None] | None = None

        self._active_lock = Lock()
        self._active: tuple[JobBatch, Queue[int]] | None = None

    def run(self, chunks: Sequence[TextChunk], template: SynthesisRequest) -> JobBatch:
        batch = JobBatch.from_chunks(list(chunks))
        total = len(batch)
        if total == 0:
            self._emit_progress(1.0)
            return batch

        done_queue: Queue[int] = Queue()
        with self._active_lock:
            self._active = (batch, done_queue)

        self._log(
            f"Processing {total} chunks "
            f"(concurrency={self.concurrency_limit}, max_retries={self.max_retries})"
        )

        pending = deque(batch.jobs)
        in_flight = 0
        finished = 0
        try:
            while finished < total:
                while pending and in_flight < self.concurrency_limit and not batch.abandoned:
                    job = pending.popleft()
                    self._launch(batch, job, template, done_queue)
                    in_flight += 1

                index = done_queue.get()
                if index == _ABANDONED:
                    self._log(
                        f"Batch abandoned with {total - finished} chunks unfinished; "
                        "late results will be ignored."
                    )
                    break

                in_flight -= 1
                finished += 1
                self._emit_progress(finished / total)
        finally:
            with self._active_lock:
                self._active = None

        return batch

    def abandon(self) -> None:
        """Stop admitting work and release the running `run()` call.

        In-flight calls are left to finish; their results are discarded.
        """
        with self._active_lock:
            active = self._active
        if active is None:
            return
        batch, done_queue = active
        batch.abandon()
        done_queue.put(_ABANDONED)

    def _launch(
        self,
        batch: JobBatch,
        job: ChunkJob,
        template: SynthesisRequest,
        done_queue: Queue[int],
    ) -> None:
        with batch.lock:
            job.start()
        self._notify_job(job)
        self._log(f"Generating chunk {job.index}: {preview(job.chunk.text)}")

        worker = Thread(
            target=self._process_job,
            args=(batch, job, template.for_text(job.chunk.text), done_queue),
            name=f"chunk-{job.index}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            self._log(f"Error starting worker for chunk {job.index}: {e}")
            self._finish(batch, job, error=str(e))
            done_queue.put(job.index)

    def _process_job(
        self,
        batch: JobBatch,
        job: ChunkJob,
        request: SynthesisRequest,
        done_queue: Queue[int],
    ) -> None:
        try:
            try:
                buffer, error = self._synthesize_with_retry(batch, job, request)
            except Exception as e:
                buffer, error = None, f"Unexpected error: {e}"
            self._finish(batch, job, buffer=buffer, error=error)
        finally:
            done_queue.put(job.index)

    def _synthesize_with_retry(
        self,
        batch: JobBatch,
        job: ChunkJob,
        request: SynthesisRequest,
    ) -> tuple[np.ndarray | None, str | None]:
        attempt = 0
        while True:
            job.attempts = attempt + 1
            try:
                return self.speech_client.synthesize(request), None
            except (SynthesisError, OSError, RuntimeError, ValueError) as e:
                error = classify_error(e)

            self._log(f"Chunk {job.index} attempt {attempt + 1} failed: {error}")

            if not isinstance(error, SynthesisRateLimited):
                return None, str(error)
            if attempt >= self.max_retries:
                self._log(f"Chunk {job.index}: retry budget exhausted after {attempt + 1} attempts.")
                return None, str(error)
            if batch.abandoned:
                return None, str(error)

            delay = backoff_delay(attempt)
            self._log(f"Rate limited. Waiting {delay:.0f}s before retrying chunk {job.index}...")
            if self._wait_before_retry(batch, delay):
                self._log(f"Chunk {job.index}: batch abandoned, not retrying.")
                return None, str(error)
            attempt += 1

    def _wait_before_retry(self, batch: JobBatch, delay: float) -> bool:
        """Wait out the backoff. Returns True if the batch was abandoned meanwhile."""
        if self._sleep is None:
            return batch.wait_abandoned(delay)
        self._sleep(delay)
        return batch.abandoned

    def _finish(
        self,
        batch: JobBatch,
        job: ChunkJob,
        *,
        buffer: np.ndarray | None = None,
        error: str | None = None,
    ) -> None:
        if batch.abandoned:
            return

        with batch.lock:
            if buffer is not None:
                job.complete(buffer)
            else:
                job.fail(error or "Failed to generate")

        if buffer is not None:
            self._log(f"Chunk {job.index} completed ({len(buffer)} samples).")
        else:
            self._log(f"Chunk {job.index} failed: {job.error_message}")
        self._notify_job(job)

    def _emit_progress(self, fraction: float) -> None:
        if self.on_progress:
            self.on_progress(fraction)

    def _notify_job(self, job: ChunkJob) -> None:
        if self.on_job_update:
            self.on_job_update(job)

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log(message)
