"""Configuration for pyfcimport.

Values are resolved once at startup from CLI options, environment variables
and the bundled defaults, then passed explicitly to the client and finder.
"""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from .exceptions import ConfigError
from .payload import PrefixPreamble

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

DEFAULT_URL = "http://localhost:8080/rest/"
DEFAULT_RESOURCES_DIR = "."
DEFAULT_PREFIX_FILE = DATA_DIR / "default-prefixes.ttl"
DEFAULT_FORMATS_FILE = DATA_DIR / "allowed-binary-formats"
FALLBACK_BINARY_FORMAT = ".jpg"

URL_ENV = "FCREPO_URL"
RESOURCES_DIR_ENV = "FCREPO_RESOURCES_DIR"
PREFIX_FILE_ENV = "FCREPO_PREFIX_FILE"
FORMATS_FILE_ENV = "FCREPO_FORMATS_FILE"
USER_ENV = "FCREPO_AUTH_USER"
PASSWORD_ENV = "FCREPO_AUTH_PASSWORD"


def _normalize_extension(ext: str) -> str:
    ext = ext.strip()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


@dataclass(frozen=True)
class AllowedBinaryFormats:
    """Ordered set of extensions uploaded as binary resources.

    Order matters: when a directory holds several ``_<ext>`` files, the
    first extension listed wins.
    """

    extensions: tuple[str, ...]

    @classmethod
    def from_iterable(cls, extensions: Iterable[str]) -> "AllowedBinaryFormats":
        seen: list[str] = []
        for ext in extensions:
            ext = _normalize_extension(ext)
            if ext and ext not in seen:
                seen.append(ext)
        return cls(tuple(seen))

    def __contains__(self, ext: object) -> bool:
        return ext in self.extensions

    def __iter__(self):
        return iter(self.extensions)

    def __len__(self) -> int:
        return len(self.extensions)


def load_allowed_binary_formats(path: Union[str, Path]) -> AllowedBinaryFormats:
    """Read allowed binary extensions, one per line.

    Falls back to ``.jpg`` alone when the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return AllowedBinaryFormats.from_iterable(f.read().splitlines())
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "Could not read allowed binary formats file %s, "
            "defaulting to %s as the only allowed binary format",
            path,
            FALLBACK_BINARY_FORMAT,
        )
        logger.debug("Exception:", exc_info=e)
        return AllowedBinaryFormats((FALLBACK_BINARY_FORMAT,))


def load_prefix_file(path: Union[str, Path]) -> PrefixPreamble:
    """Read the namespace prefix preamble.

    Raises:
        ConfigError: If the file cannot be read
    """
    try:
        return PrefixPreamble.from_file(Path(path))
    except OSError as e:
        raise ConfigError(f"Could not read prefix file {path}: {e}") from e


def build_auth_header(username: Optional[str], password: Optional[str]) -> Optional[str]:
    """Build a Basic Authorization header value.

    Returns None unless both username and password are non-empty.
    """
    if not username or not password:
        return None
    creds = f"{username}:{password}".encode()
    return "Basic " + base64.b64encode(creds).decode("ascii")


def normalize_base_url(url: str) -> str:
    """Ensure the base URL ends with '/' so identifiers resolve beneath it."""
    if not url.endswith("/"):
        logger.warning("Repository URL %s does not end with '/', appending one", url)
        url = f"{url}/"
    return url
