from __future__ import annotations

import io

import numpy as np
from scipy.io.wavfile import write

SAMPLE_RATE = 24_000
BYTES_PER_SAMPLE = 2

# Decode divides by 32768 for every sample; encode scales negatives by 32768
# and non-negatives by 32767. Existing WAV consumers rely on this pairing.
DECODE_SCALE = 32768.0
ENCODE_NEGATIVE_SCALE = 32768.0
ENCODE_POSITIVE_SCALE = 32767.0


def decode_pcm16(pcm_bytes: bytes) -> np.ndarray:
    """Convert 16-bit little-endian signed PCM into float32 samples in [-1, 1).

    A trailing odd byte (half a sample) is dropped.
    """
    usable = len(pcm_bytes) - (len(pcm_bytes) % BYTES_PER_SAMPLE)
    audio_int16 = np.frombuffer(pcm_bytes[:usable], dtype="<i2")
    return (audio_int16.astype(np.float32) / np.float32(DECODE_SCALE)).astype(np.float32)


def to_pcm16(audio: np.ndarray) -> np.ndarray:
    samples = np.clip(np.asarray(audio, dtype=np.float64).reshape(-1), -1.0, 1.0)
    scaled = np.where(
        samples < 0,
        samples * ENCODE_NEGATIVE_SCALE,
        samples * ENCODE_POSITIVE_SCALE,
    )
    # astype truncates toward zero, matching a plain int16 store.
    return scaled.astype("<i2")


def encode_wav(audio: np.ndarray, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Encode float samples as a mono 16-bit PCM WAV file (44-byte header)."""
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be > 0, got {sample_rate}.")

    wav_buffer = io.BytesIO()
    write(wav_buffer, sample_rate, to_pcm16(audio))
    return wav_buffer.getvalue()


def duration_seconds(sample_count: int, sample_rate: int = SAMPLE_RATE) -> float:
    return sample_count / float(sample_rate)
