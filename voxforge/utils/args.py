from __future__ import annotations

import argparse

from voxforge.domain.vo.synthesis_request import Speed


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="voxforge",
        description="Convert long text into speech, chunk by chunk.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Text file to narrate. If omitted, read from stdin.",
    )
    parser.add_argument(
        "--out-dir",
        default="output",
        help="Directory for generated WAV files (default: output).",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="File name stem for outputs (default: input file stem or 'voxforge').",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env). Use empty to disable.",
    )
    parser.add_argument("--chunk-size", type=int, default=None, help="Max characters per chunk (500-15000).")
    parser.add_argument(
        "--no-merge",
        dest="merge_output",
        action="store_false",
        default=None,
        help="Write one WAV per chunk instead of a single merged file.",
    )
    parser.add_argument("--voice", default=None, help="Provider voice name.")
    parser.add_argument("--model", default=None, help="Provider TTS model id.")
    parser.add_argument(
        "--speed",
        type=Speed.parse,
        default=None,
        help="Speaking rate: Slow, Normal or Fast.",
    )
    parser.add_argument("--temperature", type=float, default=None, help="Sampling temperature (0-2).")
    parser.add_argument(
        "--system",
        default=None,
        help="Optional style prompt override (otherwise default is used).",
    )
    parser.add_argument("--concurrency", type=int, default=None, help="Max in-flight synthesis calls.")
    parser.add_argument("--max-retries", type=int, default=None, help="Retries per chunk on rate limits.")
    parser.add_argument(
        "--fail-on-empty",
        action="store_true",
        help="Exit with an error when no chunk produced audio.",
    )
    parser.add_argument("--list-voices", action="store_true", help="List Gemini voices and exit.")
    parser.add_argument("--save-log", action="store_true", help="Save the run log under logs/.")
    return parser.parse_args(argv)
