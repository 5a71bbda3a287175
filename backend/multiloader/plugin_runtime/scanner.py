from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModulePackage:
    """A package archive found in the drop directory; identity is the absolute path string."""
    path: str

    @property
    def name(self) -> str:
        return Path(self.path).name


def scan(directory: Path | str, extension: str = '.zip') -> List[ModulePackage]:
    """List package archives directly inside `directory`.

    A missing directory is the first-run state: it is created and nothing is
    returned. Listing order follows the filesystem and is stable within a call.
    """
    folder = Path(directory)
    if not folder.exists():
        try:
            folder.mkdir(parents=True, exist_ok=True)
            _log.critical("Created module drop directory: %s", folder)
        except OSError:
            _log.critical("Unable to create module drop directory: %s", folder, exc_info=True)
        return []
    try:
        children = list(folder.iterdir())
    except OSError:
        _log.critical("Unable to list module drop directory: %s", folder, exc_info=True)
        return []
    suffix = extension.lower()
    packages: List[ModulePackage] = []
    for child in children:
        if not child.name.lower().endswith(suffix):
            continue
        if child.is_dir():
            continue
        packages.append(ModulePackage(path=str(child.absolute())))
    return packages
