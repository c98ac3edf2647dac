"""Artifact store -- versioned read and compare-and-swap write of repository files."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from codeedit.engine.search import is_binary

logger = logging.getLogger("engine.artifact_store")

TMP_SUFFIX = ".tmp_save"


class InvalidArtifactPath(ValueError):
    """The requested path escapes the repository root."""


class ArtifactNotFound(LookupError):
    """No file exists at the requested path."""


class BinaryArtifact(ValueError):
    """The file is binary and cannot be edited as text."""


@dataclass(slots=True)
class ArtifactContent:
    content: str
    etag: str


@dataclass(slots=True)
class WriteOutcome:
    """Result of a compare-and-swap write."""

    accepted: bool
    new_etag: str | None = None
    message: str = ""


def generate_etag(data: bytes) -> str:
    """Content hash used as the optimistic-concurrency token."""
    return hashlib.blake2b(data, digest_size=32).hexdigest()


class ArtifactStore:
    """Reads and writes text artifacts below a repository root."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, rel_path: str) -> Path:
        """Map a repository-relative path to a filesystem path.

        Raises:
            InvalidArtifactPath: On ``..`` segments or absolute paths.
        """
        if ".." in rel_path:
            raise InvalidArtifactPath("Path traversal ('..') not allowed")
        if rel_path.startswith("/") or rel_path.startswith("\\"):
            raise InvalidArtifactPath("Absolute paths not allowed")
        return self._root / rel_path

    def read(self, rel_path: str) -> ArtifactContent:
        """Load a text artifact together with its etag.

        Raises:
            InvalidArtifactPath: If the path is rejected.
            ArtifactNotFound: If the file cannot be read.
            BinaryArtifact: If the file looks binary.
        """
        path = self.resolve(rel_path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ArtifactNotFound(f"File not found: {rel_path}") from exc
        if is_binary(data):
            raise BinaryArtifact(f"Binary file: {rel_path}")
        return ArtifactContent(
            content=data.decode("utf-8", errors="replace"),
            etag=generate_etag(data),
        )

    def write(self, rel_path: str, content: str, etag: str) -> WriteOutcome:
        """Write ``content`` if the file on disk still matches ``etag``.

        A missing file is created without a version check.  The write goes
        to a sibling temp file which then replaces the target.

        Raises:
            InvalidArtifactPath: If the path is rejected.
            OSError: If the filesystem write fails.
        """
        path = self.resolve(rel_path)

        if path.exists():
            current = generate_etag(path.read_bytes())
            if current != etag:
                logger.warning("[FILES] Conflict on %s: disk etag %s != %s", rel_path, current[:12], etag[:12])
                return WriteOutcome(
                    accepted=False,
                    message="File has changed on disk. Reload required.",
                )

        data = content.encode("utf-8")
        tmp = path.with_name(path.name + TMP_SUFFIX)
        tmp.write_bytes(data)
        tmp.replace(path)
        logger.info("[FILES] Wrote %s (%d bytes)", rel_path, len(data))
        return WriteOutcome(accepted=True, new_etag=generate_etag(data))
