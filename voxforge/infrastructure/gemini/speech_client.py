from __future__ import annotations

import httpx
import numpy as np
from google import genai
from google.genai import errors, types

from voxforge.application.errors import (
    SynthesisError,
    SynthesisRateLimited,
    SynthesisRejected,
    SynthesisUnavailable,
    is_rate_limit_message,
)
from voxforge.application.request_builder import compose_prompt
from voxforge.audio.pcm_codec import decode_pcm16
from voxforge.domain.vo.synthesis_request import SynthesisRequest


def _build_generation_config(request: SynthesisRequest) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_modalities=["AUDIO"],
        temperature=request.temperature,
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(
                    voice_name=request.voice_id,
                )
            )
        ),
    )


def _map_api_error(error: errors.APIError) -> SynthesisError:
    message = f"Gemini API Error: {error.code} - {error.message or error.status}"
    if error.code == 429 or is_rate_limit_message(str(error.status or "")):
        return SynthesisRateLimited(message)
    if isinstance(error, errors.ServerError):
        return SynthesisUnavailable(message)
    return SynthesisRejected(message)


def _extract_audio(response: types.GenerateContentResponse) -> bytes:
    candidates = response.candidates or []
    if not candidates:
        raise SynthesisRejected("No candidates returned")

    content = candidates[0].content
    for part in (content.parts if content and content.parts else []):
        if part.inline_data and part.inline_data.data:
            return part.inline_data.data

    raise SynthesisRejected("No audio data found in response")


class GeminiSpeechClient:
    """Speech client for Gemini TTS models via `generate_content`.

    Style prompt and speaking rate are folded into the prompt text, since the
    TTS models do not take a system instruction.
    """

    def __init__(self, *, client: genai.Client | None, api_key: str | None):
        self.client = client
        self.api_key = api_key

    def is_configured(self) -> bool:
        return (
            self.client is not None
            and bool(self.api_key)
            and self.api_key != "PLACEHOLDER_API_KEY"
        )

    def synthesize(self, request: SynthesisRequest) -> np.ndarray:
        if self.client is None:
            raise SynthesisRejected("API Key not configured")

        try:
            response = self.client.models.generate_content(
                model=request.model_id,
                contents=compose_prompt(request),
                config=_build_generation_config(request),
            )
        except errors.APIError as e:
            raise _map_api_error(e) from e
        except httpx.TransportError as e:
            raise SynthesisUnavailable(f"Gemini connection error: {e}") from e

        return decode_pcm16(_extract_audio(response))
