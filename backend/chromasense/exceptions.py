"""
Custom exceptions for the ChromaSense palette service.

Services raise these; the API routers translate them into HTTP errors.
"""


class ChromaSenseError(Exception):
    """Base exception for all ChromaSense errors."""


class ImportFormatError(ChromaSenseError):
    """Raised when pasted text contains no usable colors."""


class ExportFormatError(ChromaSenseError):
    """Raised when an unknown export format is requested."""


class UnknownPresetError(ChromaSenseError):
    """Raised when a preference preset name is not recognised."""

    def __init__(self, name: str, valid: list):
        self.name = name
        self.valid = valid
        super().__init__(f"Unknown preset '{name}'. Valid presets: {', '.join(valid)}")


class UnknownModeError(ChromaSenseError):
    """Raised when a palette generation mode is not recognised."""


class HistoryIndexError(ChromaSenseError):
    """Raised when a history entry that does not exist is selected."""


class PaletteIndexError(ChromaSenseError):
    """Raised when a palette slot outside the current palette is edited."""


class StorageError(ChromaSenseError):
    """Raised when the snapshot store cannot be read or written."""
