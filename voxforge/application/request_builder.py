from __future__ import annotations

from voxforge.domain.vo.synthesis_request import Speed, SynthesisRequest


def compose_prompt(request: SynthesisRequest) -> str:
    """Fold delivery instructions into the text sent to prompt-driven TTS models.

    These models ignore system instructions, so the style prompt and any
    non-default speaking rate travel as a textual prefix. The result depends
    only on the request, which keeps retries of a chunk identical.
    """
    text = request.text
    if request.system_prompt and request.system_prompt.strip():
        text = f"{request.system_prompt}\n\n{text}"
    if request.speed is not Speed.NORMAL:
        text = f"Speaking Rate: {request.speed.value.lower()} pace.\n\n{text}"
    return text
