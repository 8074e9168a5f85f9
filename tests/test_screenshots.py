import pytest

from screenshots import InvalidScreenshot, ScreenshotStore
from tests.helpers import PNG_BYTES


def test_save_writes_decoded_bytes(screenshots, png_b64):
    filename = screenshots.save("abc123", 0, png_b64)
    assert filename == "abc123-0.png"
    assert screenshots.path_for(filename).read_bytes() == PNG_BYTES


def test_save_accepts_data_url(screenshots, png_b64):
    filename = screenshots.save("abc123", 1, f"data:image/png;base64,{png_b64}")
    assert screenshots.path_for(filename).read_bytes() == PNG_BYTES


def test_save_twice_overwrites(screenshots, png_b64):
    screenshots.save("abc123", 0, "AAAA")
    screenshots.save("abc123", 0, png_b64)
    assert screenshots.path_for("abc123-0.png").read_bytes() == PNG_BYTES


def test_save_creates_missing_directory(tmp_path, png_b64):
    store = ScreenshotStore(tmp_path / "not" / "yet")
    store.save("t", 0, png_b64)
    assert store.exists("t-0.png")


def test_invalid_payload_raises_and_writes_nothing(screenshots):
    with pytest.raises(InvalidScreenshot):
        screenshots.save("abc123", 0, "abc")
    assert not screenshots.exists("abc123-0.png")


def test_delete_removes_file(screenshots, png_b64):
    filename = screenshots.save("abc123", 0, png_b64)
    screenshots.delete(filename)
    assert not screenshots.exists(filename)


def test_delete_of_missing_file_is_silent(screenshots):
    screenshots.delete("never-0.png")
