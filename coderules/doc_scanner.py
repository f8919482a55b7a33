"""Documentation discovery, reading and frontmatter extraction."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .config import DEFAULT_EXTENSIONS
from .logging import get_logger
from .models import DocumentMetadata

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
_TITLE_RE = re.compile(r"^title:[ \t]*(.+)$", re.MULTILINE)
_TAGS_RE = re.compile(r"^tags:[ \t]*\[(.*)\]", re.MULTILINE)


class DocumentReadError(RuntimeError):
    """Raised when a documentation file cannot be read."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Could not read file: {path}")
        self.path = path


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Return the raw frontmatter block (if any) and the remaining body."""
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end():]


def parse_frontmatter(block: str) -> tuple[str | None, List[str] | None]:
    """Extract the declared title and tag list from a frontmatter block."""
    title = None
    title_match = _TITLE_RE.search(block)
    if title_match:
        title = _strip_quotes(title_match.group(1).strip()) or None

    tags = None
    tags_match = _TAGS_RE.search(block)
    if tags_match:
        tags = [
            _strip_quotes(tag.strip())
            for tag in tags_match.group(1).split(",")
            if _strip_quotes(tag.strip())
        ]
    return title, tags


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1].strip()
    return value


class DocScanner:
    """Walks a documentation tree and reads the markdown files it contains."""

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        exclude_dirs: Iterable[str] = (),
    ) -> None:
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.exclude_dirs = set(exclude_dirs)
        self.logger = get_logger("doc_scanner")

    def discover(self, root: str) -> List[str]:
        """Return every documentation file under ``root`` in stable walk order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Documentation path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Documentation path is not a directory: {root}")

        files = [str(path) for path in self._iter_files(root_path)]
        self.logger.info("Found %d markdown files in %s", len(files), root)
        return files

    def read(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.error("Error reading file %s: %s", path, exc)
            raise DocumentReadError(path) from exc

    def read_body(self, path: str) -> str:
        """Return the file content with any leading frontmatter removed."""
        _, body = split_frontmatter(self.read(path))
        return body

    def extract_metadata(self, path: str) -> DocumentMetadata:
        filename = os.path.basename(path)
        try:
            text = self.read(path)
        except DocumentReadError:
            return DocumentMetadata(filename=filename, path=path)

        block, _ = split_frontmatter(text)
        if block is None:
            return DocumentMetadata(filename=filename, path=path)
        title, tags = parse_frontmatter(block)
        return DocumentMetadata(filename=filename, path=path, title=title, tags=tags)

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(name for name in dirnames if name not in self.exclude_dirs)
            current_dir = Path(dirpath)
            for filename in sorted(filenames):
                if filename.lower().endswith(self.extensions):
                    yield current_dir / filename


__all__ = [
    "DocScanner",
    "DocumentReadError",
    "parse_frontmatter",
    "split_frontmatter",
]
