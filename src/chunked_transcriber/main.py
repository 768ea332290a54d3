"""
Chunked Transcriber.

Command-line entry point. ``transcribe`` runs the pipeline on a local file;
``worker`` starts the queue-driven transcription service.
"""

import argparse
import signal
import sys
from pathlib import Path

from ddtrace import patch_all
from pydantic import ValidationError

from chunked_transcriber.config import AppConfig, PipelineConfig, load_config
from chunked_transcriber.dependencies import get_orchestrator, get_worker
from chunked_transcriber.domain import (
    PipelineStatus,
    ProcessingStats,
    ProgressRecord,
    SourceAudio,
    StopToken,
    TranscriptBuilder,
)
from chunked_transcriber.logging import setup_logging

logger = setup_logging()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_STOPPED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chunked-transcriber",
        description="Transcribe long recordings chunk by chunk with Gemini.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    transcribe = commands.add_parser("transcribe", help="Transcribe a local audio file")
    transcribe.add_argument("audio_file", type=Path)
    transcribe.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Where to write the .txt and .srt files (default: next to the audio)",
    )
    transcribe.add_argument(
        "--chunk-duration",
        type=float,
        default=None,
        help="Chunk length in seconds (default: CHUNK_DURATION_SECONDS or 300)",
    )
    transcribe.add_argument(
        "--no-timestamps",
        action="store_true",
        help="Omit [MM:SS] prefixes from the text transcript",
    )
    resume = transcribe.add_mutually_exclusive_group()
    resume.add_argument(
        "--resume", dest="resume", action="store_const", const=True, default=None,
        help="Continue from saved progress without asking",
    )
    resume.add_argument(
        "--restart", dest="resume", action="store_const", const=False,
        help="Discard saved progress and start over",
    )

    commands.add_parser("worker", help="Consume transcription jobs from RabbitMQ")
    return parser.parse_args(argv)


def _confirm_resume(choice: bool | None):
    def confirm(record: ProgressRecord) -> bool:
        if choice is not None:
            return choice
        if not sys.stdin.isatty():
            return True
        answer = input(
            f"Found unfinished progress ({record.processed_chunks}/"
            f"{record.total_chunks} chunks done). Continue? [Y/n] "
        )
        return answer.strip().lower() in ("", "y", "yes")

    return confirm


def _log_progress(stats: ProcessingStats) -> None:
    logger.info(
        stats.current_action,
        extra={
            "processed_chunks": stats.processed_chunks,
            "total_chunks": stats.total_chunks,
        },
    )


def _install_interrupt_handler(stop_token: StopToken) -> None:
    """First Ctrl-C stops after the current chunk; a second one kills the process."""

    def request_stop(signum, frame):
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        print("Stopping after the current chunk...", file=sys.stderr)
        stop_token.request_stop()

    signal.signal(signal.SIGINT, request_stop)


def transcribe_file(args: argparse.Namespace, config: AppConfig) -> int:
    if not config.gemini.api_key:
        print("GEMINI_API_KEY is not set.", file=sys.stderr)
        return EXIT_ERROR
    if not args.audio_file.is_file():
        print(f"No such file: {args.audio_file}", file=sys.stderr)
        return EXIT_ERROR

    if args.chunk_duration is not None:
        try:
            pipeline = PipelineConfig.model_validate(
                {
                    **config.pipeline.model_dump(),
                    "chunk_duration_seconds": args.chunk_duration,
                }
            )
        except ValidationError as e:
            print(
                f"Invalid --chunk-duration {args.chunk_duration}: "
                f"{e.errors()[0]['msg']}",
                file=sys.stderr,
            )
            return EXIT_ERROR
        config = config.model_copy(update={"pipeline": pipeline})

    stop_token = StopToken()
    _install_interrupt_handler(stop_token)

    orchestrator = get_orchestrator(config, on_progress=_log_progress)
    run = orchestrator.run(
        SourceAudio.from_path(args.audio_file),
        stop_token=stop_token,
        confirm_resume=_confirm_resume(args.resume),
    )

    if run.error_message:
        print(run.error_message, file=sys.stderr)
    if run.status == PipelineStatus.ERROR:
        return EXIT_ERROR

    builder = TranscriptBuilder()
    output_dir = args.output_dir or args.audio_file.parent
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = args.audio_file.stem
    text_path = output_dir / f"{stem}.txt"
    srt_path = output_dir / f"{stem}.srt"
    text_path.write_text(
        builder.build_text(run.segments, include_timestamps=not args.no_timestamps),
        encoding="utf-8",
    )
    srt_path.write_text(builder.build_srt(run.segments), encoding="utf-8")
    print(f"{run.status.value}: {len(run.segments)} segments -> {text_path}, {srt_path}")

    return EXIT_OK if run.status == PipelineStatus.COMPLETED else EXIT_STOPPED


def run_worker(config: AppConfig) -> int:
    patch_all()
    worker = get_worker(config)

    def shutdown(signum, frame):
        worker.stop()

    signal.signal(signal.SIGTERM, shutdown)
    signal.signal(signal.SIGINT, shutdown)
    worker.start()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config()
    if args.command == "worker":
        return run_worker(config)
    return transcribe_file(args, config)


if __name__ == "__main__":
    sys.exit(main())
