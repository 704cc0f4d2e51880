"""Request bodies built from files on disk."""

import io
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import ResourceReadError

DEFAULT_BINARY_MIME_TYPE = "application/octet-stream"


def guess_mime_type(name: str) -> str:
    """Guess a MIME type from a file name or bare extension.

    Args:
        name: File name ("photo.jpg") or extension (".jpg")

    Returns:
        MIME type string (defaults to 'application/octet-stream')
    """
    if name.startswith(".") and name.count(".") == 1:
        name = f"file{name}"
    mime_type, _ = mimetypes.guess_type(name, strict=False)
    return mime_type or DEFAULT_BINARY_MIME_TYPE


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ResourceReadError(str(path), f"Could not read {path}: {e}") from e


class PrefixPreamble:
    """Namespace prefix declarations prepended to RDF and SPARQL payloads.

    The content is read once. Every call to :meth:`read` rewinds the
    underlying stream first, so sequential uploads each start with the
    complete preamble.
    """

    def __init__(self, content: bytes):
        self._stream = io.BytesIO(content)

    @classmethod
    def from_file(cls, path: Path) -> "PrefixPreamble":
        return cls(Path(path).read_bytes())

    def read(self) -> bytes:
        self._stream.seek(0)
        return self._stream.read()

    def __len__(self) -> int:
        return len(self._stream.getbuffer())


@dataclass(frozen=True)
class UploadPayload:
    """A fully materialized request body."""

    content: bytes
    """Bytes sent as the request body"""

    mime_type: Optional[str] = None
    """Content type for binaries (None means the request's default)"""

    @classmethod
    def prefixed(cls, preamble: PrefixPreamble, path: Path) -> "UploadPayload":
        """Preamble followed by the file's own bytes."""
        return cls(preamble.read() + _read_bytes(path))

    @classmethod
    def binary(cls, path: Path, mime_type: Optional[str] = None) -> "UploadPayload":
        """The file's bytes alone, with a MIME type guessed from its name."""
        return cls(_read_bytes(path), mime_type or guess_mime_type(path.name))

    @classmethod
    def empty(cls) -> "UploadPayload":
        return cls(b"")

    def __len__(self) -> int:
        return len(self.content)
