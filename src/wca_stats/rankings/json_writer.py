"""JSON IO for ranking artifacts.

The ranking is written as one indented JSON array. The file is produced in a
sibling temporary file and moved into place, so an existing artifact is
either fully replaced or left untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ..errors import SerializationError
from .ranking import RankingEntry, RankingSet


LOGGER = logging.getLogger(__name__)

JSON_INDENT = 2


def dumps_rankings(ranking_set: RankingSet) -> str:
    """Render a ranking set as the artifact text."""
    return json.dumps(ranking_set.to_records(), indent=JSON_INDENT, ensure_ascii=False, allow_nan=False)


class RankingWriter:
    """Write ranking sets to JSON files."""

    def __init__(self, base_dir: str | Path | None = None):
        """Initialize writer.

        Args:
            base_dir: Directory relative output paths are resolved against
        """
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def resolve(self, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        if self.base_dir is not None and not output_path.is_absolute():
            return self.base_dir / output_path
        return output_path

    def write_rankings(self, ranking_set: RankingSet, output_path: str | Path) -> Path:
        """Write the full ranking, overwriting any existing file.

        Args:
            ranking_set: Ranked entries
            output_path: Destination file

        Returns:
            Path written

        Raises:
            SerializationError: If the artifact cannot be rendered or written
        """
        path = self.resolve(output_path)
        try:
            text = dumps_rankings(ranking_set)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Could not serialize rankings: {e}") from e

        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise SerializationError(f"Could not write rankings to {path}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        LOGGER.info("Wrote %d ranking entries to %s", len(ranking_set), path)
        return path


def read_rankings(path: str | Path) -> RankingSet:
    """Read a ranking artifact back into a RankingSet."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rankings not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return RankingSet(RankingEntry.from_dict(item) for item in data)
