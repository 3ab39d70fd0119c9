from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from voxforge.application.synthesis_pipeline import BatchResult

RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "too many requests")


class ExternalServiceError(RuntimeError):
    """Raised when an external service call fails (provider-agnostic)."""


class SynthesisError(ExternalServiceError):
    """Raised when speech synthesis for a single request fails."""


class SynthesisRateLimited(SynthesisError):
    """The provider asked us to slow down. Retryable."""


class SynthesisRejected(SynthesisError):
    """The provider refused the request or returned no usable audio."""


class SynthesisUnavailable(SynthesisError):
    """The provider could not be reached or failed on its side."""


class MissingCredentialsError(RuntimeError):
    """Raised before dispatch when the provider has no usable API key."""


class MergeError(RuntimeError):
    """Raised when successful chunk buffers cannot be joined into one."""


class EmptyBatchError(RuntimeError):
    """Raised when no chunk produced audio and the batch policy demands failure."""

    def __init__(self, message: str, result: "BatchResult") -> None:
        super().__init__(message)
        self.result = result


class BatchAbandonedError(RuntimeError):
    """Raised when a batch was abandoned before every chunk finished."""


def is_rate_limit_message(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


def classify_error(error: BaseException) -> SynthesisError:
    """Map any exception raised by a speech client into the synthesis taxonomy."""
    if isinstance(error, SynthesisError):
        return error

    message = str(error) or type(error).__name__
    if is_rate_limit_message(message):
        return SynthesisRateLimited(message)
    if isinstance(error, (ConnectionError, TimeoutError)):
        return SynthesisUnavailable(message)
    return SynthesisRejected(message)
