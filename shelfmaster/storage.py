"""Flat-file storage for ShelfMaster.

Every collection lives in its own text file inside a data directory, one
record per line. Collections are rewritten in full after each change; the
loan file also supports appending a single record.
"""
import logging
from pathlib import Path
from typing import List, Union

from shelfmaster.config import DEFAULT_DATA_DIR
from shelfmaster.exceptions import StorageError

logger = logging.getLogger(__name__)


class FileStore:
    """Handles reading and writing the line-based data files."""

    def __init__(self, data_dir: Union[str, Path] = DEFAULT_DATA_DIR):
        self.data_dir = Path(data_dir)

    def path_for(self, file_name: str) -> Path:
        return self.data_dir / file_name

    def _ensure_file(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)

    def read_lines(self, file_name: str) -> List[str]:
        """Return all lines of a data file, creating it empty if missing.

        Raises:
            StorageError: If the file cannot be created or read.
        """
        path = self.path_for(file_name)
        try:
            if not path.exists():
                self._ensure_file(path)
                logger.info("Created empty data file %s", path)
                return []
            with open(path, "r", encoding="utf-8") as f:
                return f.read().splitlines()
        except OSError as e:
            raise StorageError(str(path), str(e))

    def write_lines(self, file_name: str, lines: List[str]) -> None:
        """Replace the file's content with the given lines.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(file_name)
        try:
            self._ensure_file(path)
            with open(path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as e:
            raise StorageError(str(path), str(e))
        logger.debug("Wrote %d record(s) to %s", len(lines), path)

    def append_line(self, file_name: str, line: str) -> None:
        """Append a single line to the file, creating it if needed.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(file_name)
        try:
            self._ensure_file(path)
            with open(path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise StorageError(str(path), str(e))
