"""
File-backed document store.

All reads and writes of task documents go through here. ``edit`` performs a
read-modify-write under the store's lock, which is the single funnel that
keeps concurrent edits (REST thread, MCP tools, CLI in-process) from
interleaving on the same document.

Writes are atomic: content goes to a temp file in the same directory and is
swapped in with os.replace.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar, Union

log = logging.getLogger(__name__)

T = TypeVar("T")
PathLike = Union[str, Path]


class DocumentStore:
    """
    Reads and writes whole-document text.

    Usage:
        store = DocumentStore(root)
        text = store.read("notes/today.md")
        store.edit("notes/today.md", lambda text: (text + "\\n- [ ] New", None))
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = root.resolve() if root else None
        self._lock = threading.RLock()

    @property
    def root(self) -> Optional[Path]:
        return self._root

    def resolve(self, path: PathLike) -> Path:
        """
        Resolve ``path`` against the store root.

        Raises:
            PermissionError: if a root is set and the path escapes it
        """
        p = Path(path).expanduser()
        if self._root is None:
            return p.resolve()
        full = (p if p.is_absolute() else self._root / p).resolve()
        try:
            full.relative_to(self._root)
        except ValueError:
            raise PermissionError(f"Path is outside the document root: {path}") from None
        return full

    def read(self, path: PathLike) -> str:
        full = self.resolve(path)
        try:
            # newline="" keeps CRLF documents intact through a round trip
            with full.open(encoding="utf-8", newline="") as fh:
                return fh.read()
        except FileNotFoundError:
            log.warning("Document not found: %s", full)
            raise

    def write(self, path: PathLike, text: str) -> None:
        full = self.resolve(path)
        with self._lock:
            full.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{full.name}.", dir=str(full.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                    fh.write(text)
                os.replace(tmp_name, full)
            except OSError:
                log.exception("Failed to write %s", full)
                Path(tmp_name).unlink(missing_ok=True)
                raise
        log.debug("Wrote %d chars to %s", len(text), full)

    def edit(
        self,
        path: PathLike,
        fn: Callable[[str], Tuple[str, T]],
        missing_ok: bool = False,
    ) -> T:
        """
        Read ``path``, apply ``fn`` and write the result back, atomically.

        ``fn`` receives the current text and returns (new_text, result).
        The file is left untouched when ``new_text`` equals the current text
        or ``fn`` raises. With ``missing_ok`` a missing file reads as empty
        text and is created on write. Returns ``result``.
        """
        with self._lock:
            try:
                current = self.read(path)
            except FileNotFoundError:
                if not missing_ok:
                    raise
                current = ""
            new_text, result = fn(current)
            if new_text != current:
                self.write(path, new_text)
            return result
