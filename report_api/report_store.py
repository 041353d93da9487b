"""
On-disk store for report definition files.

Reports live as flat files in one directory, each named
``<name><extension>``. Content is opaque text written whole.
"""

import logging
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class InvalidRequest(ValueError):
    """Raised when a save request is missing fields or names an unsafe path."""


class ReportStore:
    """List and save report definitions under a single root directory."""

    def __init__(self, root, extension: str = ".mrt"):
        self.root = Path(root)
        self.extension = extension

    def ensure_root(self) -> None:
        """Create the reports directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def normalize_name(self, file_name: str) -> str:
        """Append the reserved extension unless already present."""
        if file_name.endswith(self.extension):
            return file_name
        return f"{file_name}{self.extension}"

    def resolve(self, file_name: str) -> Path:
        """
        Resolve a caller-supplied name to its path inside the root.

        Raises:
            InvalidRequest: If the name would land anywhere but directly
                inside the reports directory, or is not a valid path
        """
        root = self.root.resolve()
        try:
            target = (root / self.normalize_name(file_name)).resolve()
        except ValueError:
            # embedded NUL
            raise InvalidRequest(f"Invalid report name: {file_name!r}")
        if target.parent != root:
            raise InvalidRequest(f"Invalid report name: {file_name!r}")
        return target

    def save(self, file_name: Optional[str], content: Optional[str]) -> str:
        """
        Write a report, overwriting any existing file of the same name.

        Args:
            file_name: Report name, with or without the extension
            content: Report definition text

        Returns:
            The file name the report was stored under
        """
        if not file_name or content is None or content == "":
            raise InvalidRequest("Missing fileName or reportContent")

        path = self.resolve(file_name)
        self.ensure_root()
        path.write_text(content, encoding="utf-8")
        logger.info(f"Report saved: {path.name}")
        return path.name

    def list(self) -> List[str]:
        """Return report file names in the root, sorted; empty if no root."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir()
            if p.name.endswith(self.extension) and p.is_file()
        )
