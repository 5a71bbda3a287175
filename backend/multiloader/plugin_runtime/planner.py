from __future__ import annotations

import logging
import re
import zipimport
from types import ModuleType
from typing import Callable, Optional, Sequence

import multiloader
from multiloader.core.config import Settings
from multiloader.core.errors import ConfigReadError, SelfLocateError
from multiloader.plugin_runtime.bootconfig import BootConfigStore, BootRecord, build_record
from multiloader.plugin_runtime.scanner import ModulePackage

_log = logging.getLogger(__name__)


def _archive_from_file(module_file: str, extension: str) -> Optional[str]:
    # e.g. /usr/MultiLoader.zip/multiloader/__init__.py -> /usr/MultiLoader.zip
    m = re.match(r'^(.*' + re.escape(extension) + r')[\\/]', module_file, re.IGNORECASE)
    return m.group(1) if m else None


def locate_self_package(settings: Settings, module: ModuleType = multiloader) -> str:
    """Return the path of the archive the loader itself was imported from."""
    loader = getattr(module, '__loader__', None)
    if isinstance(loader, zipimport.zipimporter):
        return loader.archive
    module_file = getattr(module, '__file__', None)
    if module_file:
        archive = _archive_from_file(module_file, settings.package_extension)
        if archive:
            return archive
    if settings.self_package:
        return settings.self_package
    raise SelfLocateError(f"{module.__name__} was not imported from a package archive and no self package is configured")


class RestartPlanner:
    """Builds the boot record that relaunches the loader with every discovered package."""

    def __init__(
        self,
        settings: Settings,
        store: BootConfigStore,
        *,
        locate_self: Callable[[Settings], str] = locate_self_package,
    ):
        self.settings = settings
        self.store = store
        self.locate_self = locate_self

    def current_heap_size(self) -> str:
        try:
            existing = self.store.read()
        except ConfigReadError:
            _log.critical("Could not read existing boot record! It may be missing or corrupted.", exc_info=True)
            return self.settings.default_heap_size
        return existing.heap_size

    def plan_restart(self, packages: Sequence[ModulePackage]) -> BootRecord | None:
        heap_size = self.current_heap_size()
        try:
            self_path = self.locate_self(self.settings)
        except SelfLocateError:
            _log.critical("Unable to detect current package path to build next run command!", exc_info=True)
            return None
        search_path = [self_path]
        search_path.extend(p.path for p in packages)
        return build_record(heap_size, search_path, self.settings.loader_entry)
