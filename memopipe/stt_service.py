"""
whisper.cpp speech-to-text wrapper.

The recogniser is run as an external process with a fixed set of decoding
parameters tuned for voice memos: greedy-ish sampling at temperature 0,
beam search with five candidates, word and entropy thresholds that curb
repetition loops, suppression of non-speech tokens, and plain-text output
without timestamps.

whisper.cpp writes ``<prefix>.txt`` for ``--output-file <prefix>``; the
wrapper moves that file to the path the caller asked for.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from .errors import ToolInvocationError
from .subprocess_utils import run_subprocess

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DECODING_PARAMETERS = [
    "--temperature", "0.0",
    "--beam-size", "5",
    "--best-of", "5",
    "--word-thold", "0.01",
    "--entropy-thold", "2.4",
    "--suppress-nst",
    "--no-timestamps",
]


class SpeechRecognizer(ABC):
    @abstractmethod
    def transcribe(self, input_path: PathLike, output_path: PathLike) -> Path:
        """Write the transcript of ``input_path`` to ``output_path``.

        Raises:
            ToolInvocationError: If no transcript was produced.
        """
        raise NotImplementedError


class WhisperCppRecognizer(SpeechRecognizer):
    def __init__(self, bin_path: str, model_path: str) -> None:
        self.bin_path = bin_path
        self.model_path = model_path

    def build_command(self, input_path: PathLike, output_prefix: PathLike) -> List[str]:
        return [
            self.bin_path,
            "-m", str(self.model_path),
            "-f", str(input_path),
            *DECODING_PARAMETERS,
            "--output-txt",
            "--output-file", str(output_prefix),
        ]

    def transcribe(self, input_path: PathLike, output_path: PathLike) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        # whisper.cpp appends .txt to the prefix itself
        prefix = output_path.with_suffix("") if output_path.suffix == ".txt" else output_path
        produced = prefix.parent / f"{prefix.name}.txt"
        # a transcript left over from an earlier run must not pass for this one
        for stale in {produced, output_path}:
            try:
                stale.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise ToolInvocationError("whisper", f"could not remove stale transcript {stale}: {exc}") from exc

        logger.info("Transcribing %s...", input_path)
        try:
            result = run_subprocess(self.build_command(input_path, prefix))
        except OSError as exc:
            raise ToolInvocationError("whisper", f"could not run {self.bin_path}: {exc}") from exc

        if result.returncode != 0:
            logger.warning(
                "whisper exited with code %s: %s",
                result.returncode,
                result.stderr.decode(errors="ignore").strip()[-500:],
            )
        if not produced.is_file():
            raise ToolInvocationError("whisper", f"no transcript produced for {input_path}")

        if produced != output_path:
            shutil.move(str(produced), str(output_path))
        return output_path
