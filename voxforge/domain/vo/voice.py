from __future__ import annotations

from voxforge.domain.vo.synthesis_request import Speed

# Prebuilt Gemini TTS voices and the character each one is tuned for.
GEMINI_VOICES: dict[str, str] = {
    "Zephyr": "Bright",
    "Puck": "Upbeat",
    "Charon": "Informative",
    "Kore": "Firm",
    "Fenrir": "Excitable",
    "Leda": "Youthful",
    "Orus": "Firm",
    "Aoede": "Breezy",
    "Callirrhoe": "Casual",
    "Autonoe": "Bright",
    "Enceladus": "Breathy",
    "Iapetus": "Clear",
    "Umbriel": "Casual",
    "Algieba": "Smooth",
    "Despina": "Smooth",
    "Erinome": "Clear",
    "Algenib": "Gravelly",
    "Rasalgethi": "Informative",
    "Laomedeia": "Upbeat",
    "Achernar": "Soft",
    "Alnilam": "Firm",
    "Schedar": "Even",
    "Gacrux": "Mature",
    "Pulcherrima": "Forward",
    "Achird": "Friendly",
    "Zubenelgenubi": "Casual",
    "Vindemiatrix": "Gentle",
    "Sadachbia": "Lively",
    "Sadaltager": "Knowledgeable",
    "Sulafat": "Warm",
}

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional narrator. Read the following text clearly and naturally."
)
DEFAULT_GEMINI_VOICE = "Kore"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_OPENAI_VOICE = "alloy"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini-tts"
DEFAULT_SPEED = Speed.NORMAL
DEFAULT_TEMPERATURE = 0.7
