from __future__ import annotations

import sys
from pathlib import Path

EXIT_OK = 0
EXIT_EMPTY = 1
EXIT_CONFIG = 2
EXIT_CREDENTIALS = 3
EXIT_IO = 4


def _ensure_repo_root_on_sys_path() -> None:
	# Allow running both:
	# - python -m voxforge.main
	# - python voxforge/main.py
	if __package__:
		return
	repo_root = str(Path(__file__).resolve().parents[1])
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


def _print_voices() -> None:
	from voxforge.domain.vo.voice import GEMINI_VOICES

	for name, character in GEMINI_VOICES.items():
		print(f"{name:<15} {character}")


def _read_input(path: str | None) -> str:
	if path:
		from voxforge.utils.text import read_text_file

		return read_text_file(path)
	return sys.stdin.read().strip()


def main(argv: list[str] | None = None) -> int:
	_ensure_repo_root_on_sys_path()

	from voxforge.application.errors import EmptyBatchError, MissingCredentialsError
	from voxforge.config import AppConfig
	from voxforge.di_container import build_container
	from voxforge.domain.vo.generation_settings import EmptyBatchPolicy
	from voxforge.infrastructure.storage.artifact_writer import ArtifactWriter
	from voxforge.utils.args import parse_args
	from voxforge.utils.env import load_dotenv
	from voxforge.utils.logger import Logger

	args = parse_args(sys.argv[1:] if argv is None else argv)

	if args.list_voices:
		_print_voices()
		return EXIT_OK

	load_dotenv(args.env_file)

	logger = Logger(on_emit=lambda line: print(line, file=sys.stderr))

	try:
		text = _read_input(args.input)
		config = AppConfig.from_env().with_generation(
			chunk_size=args.chunk_size,
			merge_output=args.merge_output,
			voice_id=args.voice,
			model_id=args.model,
			speed=args.speed,
			temperature=args.temperature,
			system_prompt=args.system,
			concurrency_limit=args.concurrency,
			max_retries=args.max_retries,
			empty_batch_policy=EmptyBatchPolicy.FAIL if args.fail_on_empty else None,
		)
	except ValueError as exc:
		print(f"Config error: {exc}", file=sys.stderr)
		return EXIT_CONFIG
	except OSError as exc:
		print(f"Could not read input: {exc}", file=sys.stderr)
		return EXIT_IO

	if not text:
		print("Nothing to narrate: input is empty.", file=sys.stderr)
		return EXIT_OK

	container = build_container(config, logger=logger)
	container.pipeline.on_progress = lambda fraction: logger.log(f"Progress: {fraction:.0%}")

	stem = args.name or (Path(args.input).stem if args.input else "voxforge")
	writer = ArtifactWriter(out_dir=Path(args.out_dir), stem=stem)

	try:
		result = container.pipeline.generate(text, config.generation)
	except MissingCredentialsError as exc:
		print(f"Credentials error: {exc}", file=sys.stderr)
		print(f"Set the API key for provider '{config.provider.name}' first.", file=sys.stderr)
		return EXIT_CREDENTIALS
	except EmptyBatchError as exc:
		print(str(exc), file=sys.stderr)
		_report_failures(exc.result.failed_jobs)
		return EXIT_EMPTY
	finally:
		if args.save_log:
			logger.log(f"Log saved to {logger.save()}")

	_report_failures(result.failed_jobs)
	if result.merge_error:
		print(f"Merge failed ({result.merge_error}); wrote individual chunks instead.", file=sys.stderr)

	try:
		paths = writer.write(result.artifacts)
	except OSError as exc:
		print(f"Could not write output: {exc}", file=sys.stderr)
		return EXIT_IO

	for path in paths:
		print(path)

	if result.is_empty:
		print("Warning: no audio was produced.", file=sys.stderr)
		return EXIT_EMPTY
	return EXIT_OK


def _report_failures(failed_jobs) -> None:
	for job in failed_jobs:
		print(f"  - Chunk {job.index + 1} failed: {job.error_message}", file=sys.stderr)


if __name__ == "__main__":
	raise SystemExit(main())
