"""
=============================================================================
ASSET HIERARCHIES
=============================================================================

The SPA handler never reads the OS file system directly. Instead it talks
to an "asset hierarchy": a read-only tree of byte blobs addressed by
slash-separated, UNROOTED paths.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ASSET PATHS                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   VALID                          INVALID                            │
    │   ─────                          ───────                            │
    │   "."            (the root)      "/index.html"   (rooted)           │
    │   "index.html"                   "static/"       (trailing slash)   │
    │   "static/js/app.js"             "a//b"          (empty element)    │
    │                                  "../secret"     (.. element)       │
    │                                  "./index.html"  (. element)        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Two operations are all the SPA handler needs:

    stat(path)  →  AssetInfo (size, mtime, is_file, is_dir)
    open(path)  →  binary stream

plus read(path) → (AssetInfo, bytes), which pairs the content with the
metadata of the version that was read. Implementations that can stat an
open handle override it.

Errors use Python's own OS error taxonomy, so callers can tell a missing
asset from a forbidden one:

    FileNotFoundError / NotADirectoryError   → asset does not exist
    PermissionError                          → access denied
    any other OSError                        → something is broken
    InvalidAssetPath                         → caller passed a bad path

=============================================================================
IMPLEMENTATIONS
=============================================================================

    DirectoryAssets("/opt/myspa/dist")
        A directory on disk. Symlinks are followed.

    MemoryAssets({"index.html": b"...", "static/js/app.js": b"..."})
        An in-memory tree, e.g. an SPA bundle shipped inside a Python
        package or built on the fly in tests. Directories are implied
        by the file paths.

Both are safe to share between worker threads: they are never mutated
after construction.

=============================================================================
"""

import errno
import io
import os
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Mapping, Optional, Union


class InvalidAssetPath(ValueError):
    """Raised for asset paths that are rooted or not in clean form."""

    def __init__(self, path: str):
        super().__init__(f"invalid asset path: {path!r}")
        self.path = path


def is_valid_asset_path(path: str) -> bool:
    """
    Check whether a path is a valid unrooted asset path.

    "." names the root. Otherwise the path must not start or end with
    a slash and must not contain empty, "." or ".." elements.
    """
    if path == ".":
        return True
    if not path:
        return False
    return all(element not in ("", ".", "..") for element in path.split("/"))


def validate_asset_path(path: str) -> None:
    """Raise InvalidAssetPath unless path is a valid asset path."""
    if not is_valid_asset_path(path):
        raise InvalidAssetPath(path)


@dataclass(frozen=True)
class AssetInfo:
    """
    Metadata about a single entry in an asset hierarchy.

    Attributes:
        name: Final path element ("." for the root).
        size: Size in bytes (0 for directories).
        mtime: Last modification time, timezone-aware UTC.
        is_file: True for regular files only.
        is_dir: True for directories.
    """

    name: str
    size: int
    mtime: datetime
    is_file: bool
    is_dir: bool = False


class AssetFS(ABC):
    """
    Abstract read-only asset hierarchy.

    Subclasses implement stat() and open() for unrooted slash paths.
    """

    @abstractmethod
    def stat(self, path: str) -> AssetInfo:
        """Return metadata for the entry at path."""
        ...

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """Open the file at path for binary reading."""
        ...

    def read(self, path: str) -> tuple[AssetInfo, bytes]:
        """Read the whole file at path along with its metadata."""
        with self.open(path) as f:
            info = self.stat(path)
            return info, f.read()


class DirectoryAssets(AssetFS):
    """
    Asset hierarchy backed by a directory on the OS file system.

    Usage:
        assets = DirectoryAssets("/opt/data/myspa")
        info = assets.stat("static/js/app.js")
        with assets.open("index.html") as f:
            html = f.read()
    """

    def __init__(self, root: Union[str, os.PathLike]):
        # Resolve once so all lookups are relative to a fixed absolute root
        self.root = Path(root).resolve()

        if not self.root.is_dir():
            raise ValueError(f"Asset root directory does not exist: {root}")

    def _full_path(self, path: str) -> Path:
        validate_asset_path(path)
        if os.sep != "/" and os.sep in path:
            raise InvalidAssetPath(path)
        if path == ".":
            return self.root
        return self.root.joinpath(*path.split("/"))

    def stat(self, path: str) -> AssetInfo:
        return self._info(path, self._full_path(path).stat())

    def open(self, path: str) -> BinaryIO:
        return self._full_path(path).open("rb")

    def read(self, path: str) -> tuple[AssetInfo, bytes]:
        with self.open(path) as f:
            # Metadata of the open file, not of whatever the path names now
            info = self._info(path, os.fstat(f.fileno()))
            return info, f.read()

    @staticmethod
    def _info(path: str, st: os.stat_result) -> AssetInfo:
        return AssetInfo(
            name=path.rsplit("/", 1)[-1],
            size=st.st_size,
            mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            is_file=stat.S_ISREG(st.st_mode),
            is_dir=stat.S_ISDIR(st.st_mode),
        )

    def __repr__(self) -> str:
        return f"DirectoryAssets({str(self.root)!r})"


class MemoryAssets(AssetFS):
    """
    Asset hierarchy held entirely in memory.

    Keys are asset paths, values are file contents (str values are
    encoded as UTF-8). All files share one modification time, which
    defaults to the moment of construction.

    Usage:
        assets = MemoryAssets({
            "index.html": '<html><head><base href="/" /></head></html>',
            "static/js/app.js": b"console.log('hi')",
        })
    """

    def __init__(
        self,
        files: Mapping[str, Union[str, bytes]],
        mtime: Optional[datetime] = None,
    ):
        self.mtime = mtime or datetime.now(timezone.utc)
        self._files: dict[str, bytes] = {}
        self._dirs: set[str] = {"."}

        for path, content in files.items():
            validate_asset_path(path)
            if path == ".":
                raise InvalidAssetPath(path)
            if isinstance(content, str):
                content = content.encode("utf-8")
            self._files[path] = bytes(content)

            # Every parent of a file is an implied directory
            parts = path.split("/")
            for depth in range(1, len(parts)):
                self._dirs.add("/".join(parts[:depth]))

    def stat(self, path: str) -> AssetInfo:
        validate_asset_path(path)
        name = path.rsplit("/", 1)[-1]

        if path in self._files:
            return AssetInfo(
                name=name,
                size=len(self._files[path]),
                mtime=self.mtime,
                is_file=True,
            )
        if path in self._dirs:
            return AssetInfo(name=name, size=0, mtime=self.mtime, is_file=False, is_dir=True)

        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

    def open(self, path: str) -> BinaryIO:
        validate_asset_path(path)

        if path in self._files:
            return io.BytesIO(self._files[path])
        if path in self._dirs:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)

        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"MemoryAssets({len(self._files)} files)"
