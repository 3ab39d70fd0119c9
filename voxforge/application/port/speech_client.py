from __future__ import annotations

from typing import Protocol

import numpy as np

from voxforge.domain.vo.synthesis_request import SynthesisRequest

AudioArray = np.ndarray


class SpeechClient(Protocol):
    def synthesize(self, request: SynthesisRequest) -> AudioArray:
        """Synthesize speech (float32 PCM ndarray in [-1, 1], 24 kHz mono).

        Raises SynthesisRateLimited, SynthesisRejected or SynthesisUnavailable.
        """
        ...

    def is_configured(self) -> bool:
        """Return True when credentials are present and usable."""
        ...
