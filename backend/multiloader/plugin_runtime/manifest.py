"""Package metadata reader.

Each package archive carries a YAML manifest at its root (default
`plugin.yml`) naming the entry point to run:

    name: temperature_logger
    version: 1.2.0
    entry_point: temperature_logger.app:main

Only `entry_point` is required; `name` and `version` are reported in logs.
"""
from __future__ import annotations
import logging, zipfile
from dataclasses import dataclass
from typing import Optional

import yaml

from multiloader.utils.string_utils import normalize_null_strings

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManifest:
    entry_point: Optional[str]
    name: Optional[str] = None
    version: Optional[str] = None

    @property
    def label(self) -> str:
        if self.name and self.version:
            return f"{self.name} (v{self.version})"
        return self.name or ''


def _optional_str(value) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def read_manifest(package_path: str, manifest_name: str = 'plugin.yml', entry_point_key: str = 'entry_point') -> PackageManifest | None:
    """Return the manifest of the archive at `package_path`, or None when it cannot be read."""
    try:
        with zipfile.ZipFile(package_path) as zf:
            raw_bytes = zf.read(manifest_name)
    except KeyError:
        _log.critical("Package has no '%s' manifest: %s", manifest_name, package_path)
        return None
    except (zipfile.BadZipFile, OSError):
        _log.critical("Unable to open package archive: %s", package_path, exc_info=True)
        return None
    try:
        data = yaml.safe_load(raw_bytes.decode('utf-8')) or {}
    except (yaml.YAMLError, UnicodeDecodeError):
        _log.critical("Unable to parse '%s' manifest of package: %s", manifest_name, package_path, exc_info=True)
        return None
    if not isinstance(data, dict):
        _log.critical("Manifest '%s' of package is not a mapping: %s", manifest_name, package_path)
        return None
    data = normalize_null_strings(data)
    return PackageManifest(
        entry_point=_optional_str(data.get(entry_point_key)),
        name=_optional_str(data.get('name')),
        version=_optional_str(data.get('version')),
    )


def read_entry_point(package_path: str, manifest_name: str = 'plugin.yml', entry_point_key: str = 'entry_point') -> Optional[str]:
    """Return the declared entry point identifier, or None when absent or unreadable."""
    manifest = read_manifest(package_path, manifest_name, entry_point_key)
    if manifest is None:
        return None
    return manifest.entry_point


def describe_package(package_path: str, manifest: PackageManifest | None = None) -> str:
    """Package path for log lines, followed by the manifest label when there is one."""
    label = manifest.label if manifest else ''
    return f"{package_path} ({label})" if label else package_path
