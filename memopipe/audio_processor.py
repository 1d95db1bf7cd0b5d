"""
Audio conversion utilities.

Voice memos are re-encoded before transcription into a clean, speech-band
mono signal.  Decoding and encoding go through the `pydub` library, which in
turn relies on `ffmpeg`.  Every conversion applies the same filter chain:

* high-pass at 80 Hz to drop rumble and handling noise,
* low-pass at 8 kHz to drop hiss above the speech band,
* a fixed gain boost,
* dynamic normalisation to even out quiet and loud passages,

and resamples to 22.05 kHz mono.  The output is either FLAC at maximum
compression or 16-bit PCM WAV.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Union

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

from .errors import ToolInvocationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TARGET_SAMPLE_RATE = 22_050
FILTER_CHAIN = "highpass=f=80,lowpass=f=8000,volume=1.5,dynaudnorm"

# codec and extra ffmpeg arguments per output format
FORMAT_PARAMETERS: Dict[str, Dict] = {
    "flac": {"codec": "flac", "parameters": ["-compression_level", "12"]},
    "wav": {"codec": "pcm_s16le", "parameters": []},
}
SUPPORTED_FORMATS = frozenset(FORMAT_PARAMETERS)


class AudioTranscoder(ABC):
    @abstractmethod
    def convert(self, input_path: PathLike, output_path: PathLike, fmt: str) -> Path:
        """Convert ``input_path`` into ``output_path`` and return the output path.

        Raises:
            ToolInvocationError: If conversion fails or leaves no output file.
        """
        raise NotImplementedError


def resolve_format(fmt: str) -> str:
    """Map a requested output format onto a supported one (``wav`` fallback)."""
    normalised = (fmt or "").strip().lower()
    if normalised in SUPPORTED_FORMATS:
        return normalised
    logger.warning("Unknown output format %r, defaulting to wav", fmt)
    return "wav"


def build_export_parameters(fmt: str) -> List[str]:
    """ffmpeg arguments appended to the pydub export command for ``fmt``."""
    return ["-af", FILTER_CHAIN, *FORMAT_PARAMETERS[fmt]["parameters"]]


class PydubTranscoder(AudioTranscoder):
    """Production transcoder backed by pydub and ffmpeg."""

    def convert(self, input_path: PathLike, output_path: PathLike, fmt: str) -> Path:
        fmt = resolve_format(fmt)
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            audio = AudioSegment.from_file(str(input_path))
            audio = audio.set_channels(1).set_frame_rate(TARGET_SAMPLE_RATE)
            exported = audio.export(
                str(output_path),
                format=fmt,
                codec=FORMAT_PARAMETERS[fmt]["codec"],
                parameters=build_export_parameters(fmt),
            )
            exported.close()
        except (CouldntDecodeError, CouldntEncodeError, OSError) as exc:
            # OSError also covers a missing ffmpeg binary
            raise ToolInvocationError("ffmpeg", f"conversion of {input_path} failed: {exc}") from exc

        if not output_path.is_file():
            raise ToolInvocationError("ffmpeg", f"no output written to {output_path}")
        return output_path
