"""Exception types raised by the loader components.

Only `SelfLocateError` ever stops a phase of the loader (restart planning);
everything else is recovered from or confined to the module that raised it.
"""
from __future__ import annotations


class MultiLoaderError(Exception):
    """Base class for loader errors."""


class ConfigReadError(MultiLoaderError):
    """The boot record could not be read or did not match the record grammar."""


class SelfLocateError(MultiLoaderError):
    """The loader could not find the package archive it was imported from."""


class ModuleError(MultiLoaderError):
    """Failure tied to one module package."""

    def __init__(self, message: str, *, package: str | None = None, entry_point: str | None = None) -> None:
        super().__init__(message)
        self.package = package
        self.entry_point = entry_point


class MetadataMissingError(ModuleError):
    """The package manifest is absent, unreadable or has no entry point."""


class EntryPointResolutionError(ModuleError):
    """The declared entry point could not be imported or is not callable with one argument."""


class EntryPointInvocationError(ModuleError):
    """The entry point was found but calling it with the process arguments failed."""
