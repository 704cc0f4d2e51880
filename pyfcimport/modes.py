"""Traversal modes and the settings each mode implies."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class TraversalMode(str, Enum):
    """Pass a traversal runs in."""

    CREATE = "create"
    """Initial population pass: PUT containers and binaries"""

    UPDATE = "update"
    """Second pass: PATCH resources with SPARQL update files"""

    @classmethod
    def parse(cls, value: Union["TraversalMode", str]) -> Optional["TraversalMode"]:
        """Return the mode named by ``value`` or None if it is not a mode.

        Examples:
            >>> TraversalMode.parse("UPDATE")
            <TraversalMode.UPDATE: 'update'>
            >>> TraversalMode.parse("delete") is None
            True
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


@dataclass(frozen=True)
class ModeSettings:
    """Everything that changes when the traversal mode changes."""

    mode: TraversalMode

    file_types: tuple[str, ...]
    """Extensions that mark a file as a payload for this mode"""

    skip_dirs_without_meta_file: bool
    """Whether directories lacking a metadata file are left alone"""

    log_prefix: str
    """Verb used in log lines ("Creating", "Patching")"""

    allows_binaries: bool
    """Whether allowed binary formats are uploaded in this mode"""

    @property
    def meta_file_names(self) -> tuple[str, ...]:
        """Names of the per-directory metadata files, in lookup order."""
        return tuple(f"_{file_type}" for file_type in self.file_types)

    def match_file_type(self, filename: str) -> Optional[str]:
        """Return the file type ``filename`` ends with, if any."""
        for file_type in self.file_types:
            if filename.endswith(file_type):
                return file_type
        return None


CREATE_SETTINGS = ModeSettings(
    mode=TraversalMode.CREATE,
    file_types=(".ttl",),
    skip_dirs_without_meta_file=False,
    log_prefix="Creating",
    allows_binaries=True,
)

UPDATE_SETTINGS = ModeSettings(
    mode=TraversalMode.UPDATE,
    file_types=(".ru", ".rq"),
    skip_dirs_without_meta_file=True,
    log_prefix="Patching",
    allows_binaries=False,
)

_SETTINGS = {
    TraversalMode.CREATE: CREATE_SETTINGS,
    TraversalMode.UPDATE: UPDATE_SETTINGS,
}


def settings_for(mode: TraversalMode) -> ModeSettings:
    """Get the settings for a traversal mode."""
    return _SETTINGS[mode]
