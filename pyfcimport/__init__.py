"""pyfcimport - bulk load a directory tree of RDF resources into a repository."""

from .api import RepositoryClient
from .config import AllowedBinaryFormats, build_auth_header
from .exceptions import ConfigError, FcImportError, ResourceReadError
from .finder import ResourceFinder
from .modes import ModeSettings, TraversalMode
from .payload import PrefixPreamble, UploadPayload
from .walker import walk_tree

__all__ = [
    "AllowedBinaryFormats",
    "ConfigError",
    "FcImportError",
    "ModeSettings",
    "PrefixPreamble",
    "RepositoryClient",
    "ResourceFinder",
    "ResourceReadError",
    "TraversalMode",
    "UploadPayload",
    "build_auth_header",
    "walk_tree",
]
