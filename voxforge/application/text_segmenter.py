from __future__ import annotations

from voxforge.domain.vo.text_chunk import TextChunk

# Highest priority first: paragraph, line, sentence enders (Myanmar, CJK,
# Latin), Arabic comma, comma, space.
BREAKPOINTS: tuple[str, ...] = (
    "\n\n",
    "\n",
    "။",
    "。",
    ".",
    "!",
    "?",
    "،",
    ",",
    " ",
)

# A breakpoint only counts if it lies past this share of the window.
MIN_BREAK_RATIO = 0.5


def find_break_index(window: str, max_chunk_size: int) -> int:
    """Return the cut position for a full window, just after the chosen breakpoint.

    Falls back to `max_chunk_size` (a hard, possibly mid-word cut) when no
    breakpoint lies past the halfway mark.
    """
    threshold = max_chunk_size * MIN_BREAK_RATIO
    for marker in BREAKPOINTS:
        last_index = window.rfind(marker)
        if last_index > threshold:
            return last_index + len(marker)
    return max_chunk_size


def segment(text: str, max_chunk_size: int) -> list[TextChunk]:
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be > 0, got {max_chunk_size}.")

    pieces: list[str] = []
    remaining = text.strip()

    while remaining:
        if len(remaining) <= max_chunk_size:
            pieces.append(remaining)
            break

        window = remaining[:max_chunk_size]
        cut = find_break_index(window, max_chunk_size)
        pieces.append(remaining[:cut].strip())
        remaining = remaining[cut:].strip()

    return [TextChunk(index=index, text=piece) for index, piece in enumerate(pieces)]
