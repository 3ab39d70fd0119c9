from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Literal

from voxforge.domain.vo.generation_settings import (
    DEFAULT_CHUNK_SIZE,
    EmptyBatchPolicy,
    GenerationSettings,
)
from voxforge.domain.vo.synthesis_request import Speed
from voxforge.domain.vo.voice import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_VOICE,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_OPENAI_VOICE,
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
)
from voxforge.utils.text import read_text_file

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_SYSTEM_PROMPT_FILE = "prompt.txt"

ProviderName = Literal["gemini", "openai"]
PROVIDERS: tuple[ProviderName, ...] = ("gemini", "openai")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer.") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number.") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (true/false).")


@dataclass(frozen=True)
class ProviderConfig:
    name: ProviderName
    api_key: str | None
    base_url: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class AppConfig:
    provider: ProviderConfig
    generation: GenerationSettings
    system_prompt: str | None = None
    system_prompt_file: str | None = DEFAULT_SYSTEM_PROMPT_FILE

    @staticmethod
    def from_env() -> "AppConfig":
        name = (os.getenv("VOXFORGE_PROVIDER") or "gemini").strip().lower()
        if name not in PROVIDERS:
            raise ValueError(
                f"VOXFORGE_PROVIDER must be one of: {', '.join(PROVIDERS)} (got {name!r})."
            )

        if name == "openai":
            api_key = os.getenv("OPENAI_API_KEY") or None
            base_url = os.getenv("OPENAI_BASE_URL") or None
            default_voice, default_model = DEFAULT_OPENAI_VOICE, DEFAULT_OPENAI_MODEL
        else:
            api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None
            base_url = None
            default_voice, default_model = DEFAULT_GEMINI_VOICE, DEFAULT_GEMINI_MODEL

        # Credentials are validated per batch by the pipeline, not here, so a
        # missing key surfaces as MissingCredentialsError before dispatch.
        provider = ProviderConfig(
            name=name,  # type: ignore[arg-type]
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=_env_float("VOXFORGE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        )

        speed_raw = os.getenv("VOXFORGE_SPEED")
        speed = Speed.parse(speed_raw) if speed_raw and speed_raw.strip() else Speed.NORMAL

        policy_raw = (os.getenv("VOXFORGE_EMPTY_BATCH_POLICY") or EmptyBatchPolicy.SOFT.value).strip().lower()
        try:
            policy = EmptyBatchPolicy(policy_raw)
        except ValueError as exc:
            raise ValueError("VOXFORGE_EMPTY_BATCH_POLICY must be 'soft' or 'fail'.") from exc

        system_prompt = os.getenv("VOXFORGE_SYSTEM_PROMPT") or None
        system_prompt_file = os.getenv("VOXFORGE_SYSTEM_PROMPT_FILE") or DEFAULT_SYSTEM_PROMPT_FILE

        config = AppConfig(
            provider=provider,
            generation=GenerationSettings(),
            system_prompt=system_prompt,
            system_prompt_file=system_prompt_file,
        )

        generation = GenerationSettings(
            chunk_size=_env_int("VOXFORGE_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            merge_output=_env_bool("VOXFORGE_MERGE_OUTPUT", True),
            voice_id=os.getenv("VOXFORGE_VOICE") or default_voice,
            model_id=os.getenv("VOXFORGE_MODEL") or default_model,
            speed=speed,
            temperature=_env_float("VOXFORGE_TEMPERATURE", DEFAULT_TEMPERATURE),
            system_prompt=config.resolve_system_prompt(),
            concurrency_limit=_env_int("VOXFORGE_CONCURRENCY", 3),
            max_retries=_env_int("VOXFORGE_MAX_RETRIES", 3),
            empty_batch_policy=policy,
        )
        return replace(config, generation=generation)

    def resolve_system_prompt(self) -> str:
        """Resolve system prompt from env or file.

        Priority (within config sources):
        1) `VOXFORGE_SYSTEM_PROMPT`
        2) `VOXFORGE_SYSTEM_PROMPT_FILE` (default: prompt.txt) if exists & non-empty
        3) the built-in narrator prompt
        """

        if self.system_prompt:
            return self.system_prompt
        if not self.system_prompt_file:
            return DEFAULT_SYSTEM_PROMPT

        try:
            text = read_text_file(self.system_prompt_file)
            return text or DEFAULT_SYSTEM_PROMPT
        except FileNotFoundError:
            return DEFAULT_SYSTEM_PROMPT

    def with_generation(self, **changes: Any) -> "AppConfig":
        """Return a copy with generation settings overridden (None values are ignored)."""
        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        return replace(self, generation=replace(self.generation, **updates))
