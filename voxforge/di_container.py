from __future__ import annotations

from dataclasses import dataclass

from voxforge.application.port.speech_client import SpeechClient
from voxforge.application.synthesis_pipeline import SynthesisPipeline
from voxforge.config import AppConfig, ProviderConfig
from voxforge.utils.logger import Logger


@dataclass(frozen=True)
class AppContainer:
    config: AppConfig
    logger: Logger
    speech_client: SpeechClient
    pipeline: SynthesisPipeline


def build_speech_client(provider: ProviderConfig) -> SpeechClient:
    if provider.name == "openai":
        from openai import OpenAI

        from voxforge.infrastructure.openai.speech_client import OpenAISpeechClient

        # OpenAI() refuses to construct without a key; keep the placeholder so
        # the missing key is reported by the pipeline's credential check.
        openai_client = OpenAI(
            api_key=provider.api_key or "PLACEHOLDER_API_KEY",
            base_url=provider.base_url,
            timeout=provider.timeout_seconds,
        )
        return OpenAISpeechClient(client=openai_client, api_key=provider.api_key)

    from google import genai
    from google.genai import types

    from voxforge.infrastructure.gemini.speech_client import GeminiSpeechClient

    gemini_client = (
        genai.Client(
            api_key=provider.api_key,
            http_options=types.HttpOptions(timeout=int(provider.timeout_seconds * 1000)),
        )
        if provider.api_key
        else None
    )
    return GeminiSpeechClient(client=gemini_client, api_key=provider.api_key)


def build_container(
    config: AppConfig,
    *,
    logger: Logger | None = None,
    speech_client: SpeechClient | None = None,
) -> AppContainer:
    logger = logger or Logger()
    speech_client = speech_client or build_speech_client(config.provider)

    pipeline = SynthesisPipeline(speech_client, logger=logger)

    return AppContainer(
        config=config,
        logger=logger,
        speech_client=speech_client,
        pipeline=pipeline,
    )
