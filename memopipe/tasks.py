"""
Orchestration layer for the voice-memo pipeline.

:class:`Pipeline` drives one audio file through every step:

1. Convert the memo into ``converted/<base>.<wav|flac>``.
2. Transcribe the converted audio into ``transcriptions/<base>.txt``.
3. Optionally polish the transcript text with a language model.
4. Publish the text as a Notion page titled ``<base>``.
5. Move the three artifacts into ``archives/<YYYY-MM-DD>/``.

A failing step stops that file's chain and is reported as a
:class:`FileOutcome` in the ``FAILED`` state; the caller carries on with the
next file.  Files are only archived after a successful publish, so a memo
whose upload failed keeps its converted audio and transcript in the working
directories and can be published again by hand.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from .archiver import archive_files
from .audio_processor import AudioTranscoder, PydubTranscoder, resolve_format
from .config import Settings
from .errors import FilesystemError, MemoPipeError, ToolInvocationError
from .logging_setup import log_success
from .notion_publisher import NotionPublisher
from .stt_service import SpeechRecognizer, WhisperCppRecognizer
from .transcript_cleaner import TranscriptPolisher

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = ".m4a"


class ItemState(enum.Enum):
    DISCOVERED = "discovered"
    CONVERTED = "converted"
    TRANSCRIBED = "transcribed"
    POLISHED = "polished"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    FAILED = "failed"


class Stage(enum.Enum):
    CONVERT = "convert"
    TRANSCRIBE = "transcribe"
    POLISH = "polish"
    PUBLISH = "publish"
    ARCHIVE = "archive"


@dataclass
class WorkItem:
    """One memo on its way through the pipeline."""

    source_path: Path
    base_name: str
    converted_path: Optional[Path] = None
    transcript_path: Optional[Path] = None
    text: Optional[str] = None
    published_id: Optional[str] = None
    state: ItemState = ItemState.DISCOVERED

    @classmethod
    def discover(cls, source_path: Path) -> "WorkItem":
        source_path = Path(source_path)
        return cls(source_path=source_path, base_name=source_path.stem)


@dataclass
class FileOutcome:
    item: WorkItem
    failed_stage: Optional[Stage] = None
    error: Optional[MemoPipeError] = None
    archive_dir: Optional[Path] = None

    @property
    def succeeded(self) -> bool:
        return self.item.state is ItemState.ARCHIVED

    @property
    def partial(self) -> bool:
        """Published, but the local artifacts could not be archived."""
        return self.failed_stage is Stage.ARCHIVE and self.item.published_id is not None


Archiver = Callable[..., Path]


@dataclass
class Pipeline:
    settings: Settings
    transcoder: AudioTranscoder
    recognizer: SpeechRecognizer
    polisher: TranscriptPolisher
    publisher: NotionPublisher
    archiver: Archiver = archive_files
    today: Callable[[], date] = field(default=date.today)

    def process_file(self, source_path: Path) -> FileOutcome:
        """Run one memo through the pipeline.

        Args:
            source_path: Path to the ``.m4a`` file in the source directory.

        Returns:
            The outcome.  ``outcome.succeeded`` is true only once the files
            have been archived.
        """
        item = WorkItem.discover(source_path)
        logger.info("Processing: %s", item.source_path.name)

        try:
            self.settings.converted_dir.mkdir(parents=True, exist_ok=True)
            self.settings.transcriptions_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return self._fail(item, Stage.CONVERT, FilesystemError(f"Failed to create working directories: {exc}"))

        outcome = self._convert(item) or self._transcribe(item)
        if outcome is not None:
            return outcome

        self._polish(item)

        outcome = self._publish(item)
        if outcome is not None:
            return outcome
        return self._archive(item)

    def _convert(self, item: WorkItem) -> Optional[FileOutcome]:
        # the extension must name the encoding actually written
        fmt = resolve_format(self.settings.output_format)
        converted_path = self.settings.converted_dir / f"{item.base_name}.{fmt}"
        logger.info("Converting to %s format...", fmt)
        try:
            item.converted_path = self.transcoder.convert(item.source_path, converted_path, fmt)
        except MemoPipeError as exc:
            return self._fail(item, Stage.CONVERT, exc)
        item.state = ItemState.CONVERTED
        log_success(logger, "Audio conversion completed: %s", item.converted_path)
        return None

    def _transcribe(self, item: WorkItem) -> Optional[FileOutcome]:
        transcript_path = self.settings.transcriptions_dir / f"{item.base_name}.txt"
        try:
            item.transcript_path = self.recognizer.transcribe(item.converted_path, transcript_path)
            item.text = item.transcript_path.read_text(encoding="utf-8")
        except MemoPipeError as exc:
            return self._fail(item, Stage.TRANSCRIBE, exc)
        except (OSError, UnicodeDecodeError) as exc:
            error = ToolInvocationError("whisper", f"could not read transcript {transcript_path}: {exc}")
            return self._fail(item, Stage.TRANSCRIBE, error)
        item.state = ItemState.TRANSCRIBED
        log_success(logger, "Transcription completed: %s", item.transcript_path)
        return None

    def _polish(self, item: WorkItem) -> None:
        item.text = self.polisher.polish(item.text)
        item.state = ItemState.POLISHED

    def _publish(self, item: WorkItem) -> Optional[FileOutcome]:
        try:
            item.published_id = self.publisher.publish(item.base_name, item.text)
        except MemoPipeError as exc:
            outcome = self._fail(item, Stage.PUBLISH, exc)
            logger.warning("Audio processing completed but Notion upload failed for %s", item.base_name)
            logger.info("Files retained in working directories due to Notion upload failure")
            return outcome
        item.state = ItemState.PUBLISHED
        log_success(logger, "Notion page created successfully: %s", item.published_id)
        return None

    def _archive(self, item: WorkItem) -> FileOutcome:
        try:
            archive_dir = self.archiver(
                item.source_path,
                item.converted_path,
                item.transcript_path,
                self.settings.archives_dir,
                today=self.today(),
            )
        except MemoPipeError as exc:
            item.state = ItemState.FAILED
            logger.warning("Notion page created but archiving failed for %s: %s", item.base_name, exc)
            return FileOutcome(item=item, failed_stage=Stage.ARCHIVE, error=exc)
        item.state = ItemState.ARCHIVED
        log_success(logger, "Processing completed for %s", item.base_name)
        return FileOutcome(item=item, archive_dir=archive_dir)

    def _fail(self, item: WorkItem, stage: Stage, error: MemoPipeError) -> FileOutcome:
        item.state = ItemState.FAILED
        logger.error("%s failed for %s: %s", stage.value.capitalize(), item.source_path.name, error)
        return FileOutcome(item=item, failed_stage=stage, error=error)


def build_pipeline(settings: Settings) -> Pipeline:
    """Wire the production adapters for ``settings``."""
    return Pipeline(
        settings=settings,
        transcoder=PydubTranscoder(),
        recognizer=WhisperCppRecognizer(settings.whisper_bin_path, settings.whisper_model_path),
        polisher=TranscriptPolisher.from_settings(settings),
        publisher=NotionPublisher.from_settings(settings),
    )
