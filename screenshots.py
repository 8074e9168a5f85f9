import base64
import binascii
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class InvalidScreenshot(ValueError):
    pass


def screenshot_filename(task_id: str, index: int) -> str:
    return f"{task_id}-{index}.png"


def decode_payload(data: str) -> bytes:
    """Decode raw base64 or a `data:image/png;base64,...` URL."""
    if "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data)
    except (binascii.Error, ValueError) as e:
        raise InvalidScreenshot("screenshot payload is not valid base64") from e


class ScreenshotStore:
    """PNG files named `{task_id}-{index}.png` in a single directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def save(self, task_id: str, index: int, data: str) -> str:
        payload = decode_payload(data)
        filename = screenshot_filename(task_id, index)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(filename).write_bytes(payload)
        return filename

    def delete(self, filename: str) -> None:
        """Best-effort removal; a missing or locked file is only logged."""
        try:
            self.path_for(filename).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove screenshot %s: %s", filename, e)
