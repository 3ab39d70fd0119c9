from __future__ import annotations

from typing import Any

import numpy as np
from openai import (
    APIConnectionError,
    InternalServerError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from voxforge.application.errors import (
    SynthesisRateLimited,
    SynthesisRejected,
    SynthesisUnavailable,
)
from voxforge.audio.pcm_codec import decode_pcm16
from voxforge.domain.vo.synthesis_request import Speed, SynthesisRequest

SPEED_FACTORS: dict[Speed, float] = {
    Speed.SLOW: 0.75,
    Speed.NORMAL: 1.0,
    Speed.FAST: 1.25,
}


class OpenAISpeechClient:
    """Speech client for the OpenAI `audio.speech` endpoint (24 kHz PCM)."""

    def __init__(self, *, client: OpenAI, api_key: str | None = None):
        self.client = client
        self.api_key = api_key

    def is_configured(self) -> bool:
        key = self.api_key if self.api_key is not None else self.client.api_key
        return bool(key) and key != "PLACEHOLDER_API_KEY"

    def synthesize(self, request: SynthesisRequest) -> np.ndarray:
        params: dict[str, Any] = {
            "model": request.model_id,
            "voice": request.voice_id,
            "input": request.text,
            "response_format": "pcm",
            "speed": SPEED_FACTORS[request.speed],
        }
        if request.system_prompt and request.system_prompt.strip():
            params["instructions"] = request.system_prompt

        try:
            response = self.client.audio.speech.create(**params)
            pcm_bytes = response.read()
        except RateLimitError as e:
            raise SynthesisRateLimited(str(e)) from e
        except (APIConnectionError, InternalServerError) as e:
            raise SynthesisUnavailable(str(e)) from e
        except OpenAIError as e:
            raise SynthesisRejected(str(e)) from e

        if not pcm_bytes:
            raise SynthesisRejected("No audio data found in response")
        return decode_pcm16(pcm_bytes)
