import pytest

from memopipe.chunker import DEFAULT_CHUNK_SIZE, _find_break, split_text


def rejoin(text, chunks):
    """Rejoin chunks, checking each gap is a single consumed space/newline or nothing."""
    out = ""
    pos = 0
    for chunk in chunks:
        if pos and text[pos] in " \n" and not text.startswith(chunk, pos):
            out += text[pos]
            pos += 1
        assert text.startswith(chunk, pos)
        out += chunk
        pos += len(chunk)
    return out


def test_empty_text_has_no_chunks():
    assert split_text("") == []
    assert split_text("", 5) == []


def test_short_text_is_one_chunk():
    assert split_text("hello world") == ["hello world"]
    assert split_text("x" * DEFAULT_CHUNK_SIZE) == ["x" * DEFAULT_CHUNK_SIZE]


def test_breaks_on_space_at_limit():
    text = "a" * 1900 + " "
    assert len(text) == 1901
    assert split_text(text, 1900) == ["a" * 1900]


def test_breaks_on_nearest_whitespace_not_mid_word():
    text = "alpha beta gamma delta"
    chunks = split_text(text, 12)
    assert chunks == ["alpha beta", "gamma delta"]


def test_breaks_on_newline():
    text = "first line\nsecond"
    assert split_text(text, 12) == ["first line", "second"]


def test_hard_cut_without_whitespace():
    text = "x" * 4500
    chunks = split_text(text, 1900)
    assert [len(c) for c in chunks] == [1900, 1900, 700]
    assert "".join(chunks) == text


def test_hard_cut_when_whitespace_is_outside_lookback_window():
    text = "a " + "b" * 300
    chunks = split_text(text, 200)
    assert chunks[0] == text[:200]


@pytest.mark.parametrize("max_size", [1, 2, 3, 7, 50])
def test_chunks_respect_limit_and_order(max_size):
    text = ("the quick brown fox\njumps over the lazy dog " * 20).rstrip()
    chunks = split_text(text, max_size)
    assert all(0 < len(c) <= max_size for c in chunks)
    assert rejoin(text, chunks) == text


def test_rejects_non_positive_size():
    with pytest.raises(ValueError):
        split_text("abc", 0)


def test_find_break_reports_no_whitespace_as_none():
    text = "x" * 300
    assert _find_break(text, 0, 250) is None
    assert _find_break("ab cd" + "x" * 10, 0, 10) == 2
