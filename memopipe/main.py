"""
Command-line entry points.

``memopipe`` processes every ``.m4a`` file in ``./source/``: each memo is
converted, transcribed with whisper.cpp, optionally polished, published to
Notion and archived to ``./archives/<YYYY-MM-DD>/``.  Files are handled one
at a time; a failure only affects the file it happened on.

``memopipe-polish`` runs the polishing step on its own, for trying out a
prompt against an existing transcript.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .config import INSTALL_HINTS, Settings, check_dependencies, load_env_file
from .errors import ConfigurationError, UpstreamAPIError
from .logging_setup import log_success, setup_logging
from .tasks import AUDIO_EXTENSION, Pipeline, build_pipeline
from .transcript_cleaner import TranscriptPolisher

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Processes .m4a files in the ./source/ directory by:
1. Converting them to .wav or .flac format
2. Transcribing them using whisper.cpp
3. Polishing the transcript (when OPENAI_API_KEY and a prompt file are set)
4. Creating Notion pages with the transcript
5. Archiving all files to date-organized directories
"""

EPILOG = """\
configuration is read from the environment or from a .env file:
  NOTION_API_TOKEN       Notion integration API token
  NOTION_PARENT_PAGE_ID  ID of the parent page for new transcript pages
  WHISPER_BIN_PATH       path to the whisper.cpp CLI binary
  WHISPER_MODEL_PATH     path to the whisper model file
  OUTPUT_FORMAT          'wav' or 'flac' (default: wav)
  OPENAI_API_KEY         enables transcript polishing (optional)
  POLISH_PROMPT_PATH     polishing instructions (default: polish-prompt.txt)
"""


@dataclass
class RunSummary:
    succeeded: int = 0
    failed: int = 0
    archive_dirs: List[Path] = field(default_factory=list)


class _ArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments with the full help text and exit status 1."""

    def error(self, message: str):
        self.print_help(sys.stderr)
        self.exit(1, f"\n{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    return _ArgumentParser(
        prog="memopipe",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )


def discover_audio_files(source_dir: Path) -> List[Path]:
    """Return the ``.m4a`` files directly inside ``source_dir``."""
    return sorted(
        path
        for path in source_dir.iterdir()
        if path.is_file() and path.suffix.lower() == AUDIO_EXTENSION
    )


def cleanup_working_dirs(settings: Settings) -> None:
    """Remove the converted/transcriptions directories if they are empty."""
    for directory in (settings.converted_dir, settings.transcriptions_dir):
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                logger.info("Removed empty %s directory", directory.name)
        except OSError as exc:
            logger.warning("Could not remove %s directory: %s", directory.name, exc)


def run(settings: Settings, pipeline: Pipeline, files: Optional[Sequence[Path]] = None) -> RunSummary:
    """Process every discovered memo sequentially and summarise the run."""
    if files is None:
        files = discover_audio_files(settings.source_dir)
    summary = RunSummary()

    for path in files:
        outcome = pipeline.process_file(path)
        if outcome.succeeded:
            summary.succeeded += 1
            if outcome.archive_dir is not None and outcome.archive_dir not in summary.archive_dirs:
                summary.archive_dirs.append(outcome.archive_dir)
        else:
            summary.failed += 1

    cleanup_working_dirs(settings)

    logger.info("Processing complete!")
    log_success(logger, "%d file(s) processed successfully", summary.succeeded)
    if summary.failed:
        logger.warning("%d file(s) failed to process", summary.failed)
    for archive_dir in summary.archive_dirs:
        logger.info("Successfully processed files have been archived to: %s/", archive_dir)
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    build_parser().parse_args(argv)

    env_loaded = load_env_file()
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    if env_loaded:
        logger.info("Loaded configuration from .env file")
    logger.info("Starting audio conversion and transcription pipeline...")

    try:
        check_dependencies(settings)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        print(INSTALL_HINTS, file=sys.stderr)
        return 1

    if not settings.source_dir.is_dir():
        logger.error("Source directory not found. Please create a 'source' directory with .m4a files.")
        return 1

    files = discover_audio_files(settings.source_dir)
    if not files:
        logger.warning("No .m4a files found in source directory")
        return 0
    logger.info("Found %d .m4a file(s) to process", len(files))

    run(settings, build_pipeline(settings), files)
    # per-file failures are reported in the summary, not in the exit status
    return 0


def _build_polish_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memopipe-polish",
        description="Polish a transcript with the configured prompt, from FILE or stdin.",
    )
    parser.add_argument("file", nargs="?", type=Path, help="transcript file to polish")
    return parser


def polish_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_polish_parser().parse_args(argv)

    load_env_file()
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    if args.file is not None:
        if not args.file.is_file():
            logger.error("File not found: %s", args.file)
            return 1
        logger.info("Reading transcript from: %s", args.file)
        try:
            text = args.file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Could not read %s: %s", args.file, exc)
            return 1
    elif not sys.stdin.isatty():
        logger.info("Reading transcript from stdin...")
        text = sys.stdin.read()
    else:
        logger.error("No input provided. Please provide a file path or pipe text to stdin.")
        return 1

    if not text.strip():
        logger.error("Input transcript is empty")
        return 1

    polisher = TranscriptPolisher.from_settings(settings)
    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY not set. Please set it in .env file or as environment variable.")
        return 1
    if not settings.polish_prompt:
        logger.error("Prompt file not found. Set POLISH_PROMPT_PATH or create polish-prompt.txt.")
        return 1

    print("=== ORIGINAL TRANSCRIPT ===")
    print(text)
    try:
        polished = polisher.request_polish(text)
    except UpstreamAPIError as exc:
        logger.error("Failed to polish transcript: %s", exc.message)
        return 1
    print("=== POLISHED TRANSCRIPT ===")
    print(polished)
    log_success(logger, "Transcript polishing completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
