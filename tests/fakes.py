"""In-memory stand-ins for the external-tool and HTTP adapters."""

from pathlib import Path

from memopipe.errors import ToolInvocationError, UpstreamAPIError


class FakeTranscoder:
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def convert(self, input_path, output_path, fmt):
        self.calls.append((Path(input_path), Path(output_path), fmt))
        if Path(input_path).stem in self.fail_on:
            raise ToolInvocationError("ffmpeg", "conversion failed")
        Path(output_path).write_bytes(b"RIFF")
        return Path(output_path)


class FakeRecognizer:
    def __init__(self, fail_on=(), text="hello from the memo\n"):
        self.fail_on = set(fail_on)
        self.text = text
        self.calls = []

    def transcribe(self, input_path, output_path):
        self.calls.append((Path(input_path), Path(output_path)))
        if Path(input_path).stem in self.fail_on:
            raise ToolInvocationError("whisper", "no transcript produced")
        Path(output_path).write_text(self.text, encoding="utf-8")
        return Path(output_path)


class FakePolisher:
    def __init__(self, suffix=None):
        self.suffix = suffix
        self.calls = []

    def polish(self, text):
        self.calls.append(text)
        return text if self.suffix is None else text + self.suffix


class FakePublisher:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def publish(self, title, text):
        self.calls.append((title, text))
        if self.fail:
            raise UpstreamAPIError("notion", "validation_error", status_code=400)
        return f"page-{title}"


