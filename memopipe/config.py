"""
Runtime configuration.

All settings come from the environment (optionally seeded from a ``.env``
file in the working directory) and are read exactly once, at startup, into
an immutable :class:`Settings` instance.  Components receive that instance
explicitly; nothing else in the package looks at ``os.environ``.

Environment variables:

* ``NOTION_API_TOKEN`` / ``NOTION_PARENT_PAGE_ID`` – required to publish.
  Checked lazily, when the first page is created.
* ``WHISPER_BIN_PATH`` / ``WHISPER_MODEL_PATH`` – whisper.cpp CLI and model.
* ``OUTPUT_FORMAT`` – ``wav`` (default) or ``flac``.
* ``OPENAI_API_KEY`` – enables transcript polishing when set.
* ``POLISH_PROMPT_PATH`` – polishing instructions (default
  ``polish-prompt.txt``).  A missing file disables polishing.
* ``MEMOPIPE_BASE_DIR`` – directory holding ``source/``, ``converted/``,
  ``transcriptions/`` and ``archives/`` (default: current directory).
* ``LOG_LEVEL`` – console log level (default ``INFO``).
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "wav"
DEFAULT_PROMPT_PATH = "polish-prompt.txt"

INSTALL_HINTS = (
    "Install missing dependencies:\n"
    "  - ffmpeg: brew install ffmpeg (or your distribution's package)\n"
    "  - whisper: build whisper.cpp and set WHISPER_BIN_PATH and WHISPER_MODEL_PATH\n"
    "  - put the required environment variables in a .env file"
)


@dataclass(frozen=True)
class Settings:
    notion_api_token: str = ""
    notion_parent_page_id: str = ""
    whisper_bin_path: str = ""
    whisper_model_path: str = ""
    output_format: str = DEFAULT_OUTPUT_FORMAT
    openai_api_key: str = ""
    polish_prompt: Optional[str] = None
    base_dir: Path = Path(".")
    log_level: str = "INFO"

    @property
    def source_dir(self) -> Path:
        return self.base_dir / "source"

    @property
    def converted_dir(self) -> Path:
        return self.base_dir / "converted"

    @property
    def transcriptions_dir(self) -> Path:
        return self.base_dir / "transcriptions"

    @property
    def archives_dir(self) -> Path:
        return self.base_dir / "archives"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        if environ is None:
            environ = os.environ

        base_dir = Path(environ.get("MEMOPIPE_BASE_DIR", "") or ".")
        prompt_path = Path(environ.get("POLISH_PROMPT_PATH", "") or DEFAULT_PROMPT_PATH)
        if not prompt_path.is_absolute():
            prompt_path = base_dir / prompt_path

        return cls(
            notion_api_token=environ.get("NOTION_API_TOKEN", ""),
            notion_parent_page_id=environ.get("NOTION_PARENT_PAGE_ID", ""),
            whisper_bin_path=environ.get("WHISPER_BIN_PATH", ""),
            whisper_model_path=environ.get("WHISPER_MODEL_PATH", ""),
            output_format=(environ.get("OUTPUT_FORMAT", "") or DEFAULT_OUTPUT_FORMAT).strip().lower(),
            openai_api_key=environ.get("OPENAI_API_KEY", ""),
            polish_prompt=load_polish_prompt(prompt_path),
            base_dir=base_dir,
            log_level=environ.get("LOG_LEVEL", "") or "INFO",
        )


def load_env_file(directory: Optional[Path] = None) -> bool:
    """Export the variables of ``.env`` in ``directory`` (default: cwd).

    Variables already set in the environment take precedence.  Returns
    whether a file was found and loaded.
    """
    return load_dotenv((directory or Path.cwd()) / ".env")


def load_polish_prompt(path: Path) -> Optional[str]:
    """Return the instruction template verbatim, or ``None`` if there is none."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning("Could not read polish prompt %s (%s); polishing disabled", path, exc)
        return None


def check_dependencies(settings: Settings) -> None:
    """Fail fast when a tool the conversion or transcription steps need is absent.

    Publishing credentials are deliberately not checked here.

    Raises:
        ConfigurationError: Listing every missing item.
    """
    missing: List[str] = []
    if shutil.which("ffmpeg") is None:
        missing.append("ffmpeg")

    if not settings.whisper_bin_path:
        missing.append("WHISPER_BIN_PATH environment variable")
    elif not Path(settings.whisper_bin_path).is_file():
        missing.append(f"whisper binary (at {settings.whisper_bin_path})")

    if not settings.whisper_model_path:
        missing.append("WHISPER_MODEL_PATH environment variable")
    elif not Path(settings.whisper_model_path).is_file():
        missing.append(f"whisper model (at {settings.whisper_model_path})")

    if missing:
        raise ConfigurationError(f"Missing dependencies: {', '.join(missing)}")
