"""Packaged file access: the listing of files shipped with a manifest."""

import asyncio
import codecs
import posixpath
import zipfile
from collections.abc import AsyncGenerator, Mapping
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlsplit

DEFAULT_CHUNK_SIZE = 64 * 1024


def normalize_path(path: str) -> str:
    """Normalize a manifest-relative path to a package key.

    Query strings and fragments are dropped, percent-escapes decoded, `.` and
    `..` resolved and leading slashes stripped: "./icons/../a%20b.png#x"
    becomes "a b.png".
    """
    cleaned = unquote(urlsplit(path.replace("\\", "/")).path)
    normalized = posixpath.normpath("/" + cleaned).lstrip("/")
    return "" if normalized == "." else normalized


def listing_key(path: str) -> str:
    """Package key for a listing entry; directories keep a trailing slash."""
    normalized = normalize_path(path)
    if normalized and path.replace("\\", "/").endswith("/"):
        return normalized + "/"
    return normalized


class FileOracle(Protocol):
    """Read-only view of the files packaged with a manifest."""

    def files(self) -> frozenset[str]:
        """All normalized paths in the package; directories end with "/"."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def open_stream(self, path: str, text_mode: bool = False) -> AsyncGenerator[bytes | str, None]:
        """Stream a file's contents in chunks (str chunks in text mode)."""
        ...


class InMemoryPackage:
    """Package backed by a path -> content mapping."""

    def __init__(self, contents: Mapping[str, bytes | str], chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._contents = {
            listing_key(path): data.encode("utf-8") if isinstance(data, str) else bytes(data)
            for path, data in contents.items()
        }
        self.chunk_size = chunk_size

    def files(self) -> frozenset[str]:
        return frozenset(self._contents)

    def exists(self, path: str) -> bool:
        return path in self._contents

    def read_text(self, path: str) -> str:
        return self._contents[path].decode("utf-8-sig")

    async def open_stream(self, path: str, text_mode: bool = False) -> AsyncGenerator[bytes | str, None]:
        if path not in self._contents:
            raise FileNotFoundError(f"File not in package: {path}")
        data = self._contents[path]
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        for start in range(0, max(len(data), 1), self.chunk_size):
            chunk = data[start:start + self.chunk_size]
            final = start + self.chunk_size >= len(data)
            yield decoder.decode(chunk, final) if text_mode else chunk
            await asyncio.sleep(0)


class DirectoryPackage:
    """Package backed by an unpacked extension directory."""

    def __init__(self, root: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.root = Path(root)
        if not self.root.is_dir():
            raise FileNotFoundError(f"Missing package directory: {self.root}")
        self.chunk_size = chunk_size
        self._files = frozenset(
            p.relative_to(self.root).as_posix() + ("/" if p.is_dir() else "")
            for p in self.root.rglob("*")
        )

    def files(self) -> frozenset[str]:
        return self._files

    def exists(self, path: str) -> bool:
        return path in self._files

    def read_text(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8-sig")

    async def open_stream(self, path: str, text_mode: bool = False) -> AsyncGenerator[bytes | str, None]:
        if path not in self._files:
            raise FileNotFoundError(f"File not in package: {path}")
        if text_mode:
            f = open(self.root / path, encoding="utf-8", errors="replace")
        else:
            f = open(self.root / path, "rb")
        with f:
            while True:
                chunk = await asyncio.to_thread(f.read, self.chunk_size)
                if not chunk:
                    break
                yield chunk


class ZipPackage:
    """Package backed by a .zip / .xpi archive."""

    def __init__(self, archive_path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.archive_path = Path(archive_path)
        if not self.archive_path.is_file():
            raise FileNotFoundError(f"Missing package archive: {self.archive_path}")
        self.chunk_size = chunk_size
        with zipfile.ZipFile(self.archive_path) as archive:
            self._files = frozenset(
                listing_key(info.filename) for info in archive.infolist()
            )

    def files(self) -> frozenset[str]:
        return self._files

    def exists(self, path: str) -> bool:
        return path in self._files

    def read_text(self, path: str) -> str:
        with zipfile.ZipFile(self.archive_path) as archive:
            return archive.read(path).decode("utf-8-sig")

    async def open_stream(self, path: str, text_mode: bool = False) -> AsyncGenerator[bytes | str, None]:
        if path not in self._files:
            raise FileNotFoundError(f"File not in package: {path}")
        # Each stream gets its own handle so concurrent readers don't share state.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        with zipfile.ZipFile(self.archive_path) as archive, archive.open(path) as f:
            while True:
                chunk = await asyncio.to_thread(f.read, self.chunk_size)
                if not chunk:
                    break
                yield decoder.decode(chunk) if text_mode else chunk
        if text_mode:
            tail = decoder.decode(b"", True)
            if tail:
                yield tail


def open_package(path: Path) -> DirectoryPackage | ZipPackage:
    """Open a directory or an archive as a package."""
    path = Path(path)
    if path.is_dir():
        return DirectoryPackage(path)
    return ZipPackage(path)
