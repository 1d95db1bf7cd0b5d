from datetime import date

import pytest

from fakes import FakePolisher, FakePublisher, FakeRecognizer, FakeTranscoder
from memopipe.archiver import archive_files
from memopipe.config import Settings
from memopipe.tasks import Pipeline


@pytest.fixture
def settings(tmp_path):
    s = Settings(
        whisper_bin_path="/opt/whisper/main",
        whisper_model_path="/opt/whisper/ggml-base.en.bin",
        notion_api_token="secret",
        notion_parent_page_id="parent",
        base_dir=tmp_path,
    )
    s.source_dir.mkdir()
    return s


@pytest.fixture
def make_source(settings):
    def _make(name):
        path = settings.source_dir / name
        path.write_bytes(b"m4a-data")
        return path

    return _make


@pytest.fixture
def make_pipeline(settings):
    def _make(**overrides):
        kwargs = dict(
            settings=settings,
            transcoder=FakeTranscoder(),
            recognizer=FakeRecognizer(),
            polisher=FakePolisher(),
            publisher=FakePublisher(),
            archiver=archive_files,
            today=lambda: date(2024, 1, 15),
        )
        kwargs.update(overrides)
        return Pipeline(**kwargs)

    return _make
