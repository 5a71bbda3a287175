from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from multiloader.plugin_runtime.scanner import ModulePackage

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileReport:
    missing: bool
    ready: Tuple[ModulePackage, ...]
    needs_load: Tuple[ModulePackage, ...]
    lines: Tuple[str, ...]


def reconcile(active_paths: Sequence[str], packages: Sequence[ModulePackage]) -> ReconcileReport:
    """Compare discovered packages with the active search path.

    Matching is exact string equality; paths are not normalised and symlinks
    are not resolved.
    """
    active = set(active_paths)
    ready = []
    needs_load = []
    lines = []
    for package in packages:
        if package.path in active:
            ready.append(package)
            line = f"Loaded (ready): {package.path}"
        else:
            needs_load.append(package)
            line = f"Needs to be Loaded (missing): {package.path}"
        lines.append(line)
        _log.critical(line)
    return ReconcileReport(
        missing=bool(needs_load),
        ready=tuple(ready),
        needs_load=tuple(needs_load),
        lines=tuple(lines),
    )
