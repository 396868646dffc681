"""Resolution of slash-delimited paths to directories of the output file.

The output file is an already-open ``uproot`` writable directory owned by the
caller. Sub-directories are created on first use and cached per path, so the
same path always resolves to the same directory object.
"""

import logging
from typing import Optional

import uproot

logger = logging.getLogger(__name__)


def normalize_path(path: Optional[str]) -> str:
    """Collapse a sub-directory path to ``"a/b"`` form (``""`` = top level)."""
    if path is None:
        return ""
    segments = (segment.strip() for segment in path.split("/"))
    return "/".join(segment for segment in segments if segment)


class DirectoryResolver:
    """Maps sub-directory paths to writable directories under an output file."""

    def __init__(self, output: Optional[uproot.WritableDirectory] = None):
        self.output = output
        self._directories: dict[str, uproot.WritableDirectory] = {}

    def resolve(self, path: Optional[str]) -> Optional[uproot.WritableDirectory]:
        """Walk/create each segment of ``path`` under the output file.

        Existing sub-directories are reused. A blank path resolves to the
        output file itself. If a segment cannot be created the deepest
        directory reached so far is returned instead.
        """
        if self.output is None:
            logger.warning(f"Output file not set, cannot resolve directory '{path}'")
            return None

        key = normalize_path(path)
        if not key:
            return self.output

        cached = self._directories.get(key)
        if cached is not None:
            return cached

        current = self.output
        current_path = ""
        for segment in key.split("/"):
            sub_path = f"{current_path}/{segment}" if current_path else segment
            sub = self._directories.get(sub_path)
            if sub is None:
                try:
                    sub = self._subdirectory(current, segment)
                except Exception as e:
                    logger.error(
                        f"Failed to create directory '{sub_path}': {e}; "
                        f"using '{current_path or '/'}' instead"
                    )
                    return current
                self._directories[sub_path] = sub
                logger.debug(f"Resolved directory: {sub_path}")
            current = sub
            current_path = sub_path

        return current

    def _subdirectory(
        self, directory: uproot.WritableDirectory, name: str
    ) -> uproot.WritableDirectory:
        """Return the sub-directory ``name`` of ``directory``, creating it if missing."""
        if name in directory.keys(recursive=False, cycle=False):
            existing = directory[name]
            if not isinstance(existing, uproot.WritableDirectory):
                raise ValueError(f"'{name}' already exists and is not a directory")
            return existing
        return directory.mkdir(name)

    def count(self) -> int:
        """Number of sub-directories resolved so far."""
        return len(self._directories)

    def clear(self) -> None:
        """Forget every cached sub-directory."""
        self._directories.clear()
