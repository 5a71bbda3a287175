"""Central configuration.

All fixed strings, paths and defaults the loader needs live on one frozen
`Settings` instance. `load_settings()` builds it once at startup and the
entrypoint hands it to every component; nothing reads the environment after
that point.

Env vars:
  MULTILOADER_CONFIG_FILE        - explicit path to a config.env file
  MULTILOADER_HOME               - base directory for the drop folder and boot record
  MULTILOADER_DROP_DIR           - directory scanned for module packages
  MULTILOADER_BOOT_FILE          - boot record file read/written on restart
  MULTILOADER_PACKAGE_EXTENSION  - package file extension (case-insensitive)
  MULTILOADER_MANIFEST_NAME      - manifest file name inside each package
  MULTILOADER_SELF_PACKAGE       - path of the loader's own package archive
  MULTILOADER_HEAP_SIZE          - heap size token used when no record exists
  MULTILOADER_RESTART_EXIT_CODE  - exit code that asks the supervisor to relaunch
  MULTILOADER_LOG_LEVEL          - root logger level
  MULTILOADER_LOG_FILE           - optional log file
  MULTILOADER_VERSION            - override reported version
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from multiloader import __version__

DEFAULT_HEAP_SIZE = '25M'


def _load_env_file(environ: Mapping[str, str]) -> Optional[Path]:
    """Load the first config.env found; explicit override wins over the working directory."""
    candidates = []
    override = environ.get('MULTILOADER_CONFIG_FILE')
    if override:
        candidates.append(Path(override))
    candidates.append(Path.cwd() / 'config.env')
    for p in candidates:
        if p.is_file():
            load_dotenv(str(p))
            return p
    return None


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_name: str = 'MultiLoader'
    version: str = __version__
    home_dir: Path = Path('data')
    drop_dir: Path = Path('data') / 'MultiLoaderClasspath'
    boot_file: Path = Path('data') / 'bootrun'
    package_extension: str = '.zip'
    manifest_name: str = 'plugin.yml'
    entry_point_key: str = 'entry_point'
    # Identifier written as the entry class of the next launch
    loader_entry: str = 'multiloader.entrypoint'
    self_package: Optional[str] = None
    default_heap_size: str = DEFAULT_HEAP_SIZE
    thread_name_prefix: str = 'MultiLoaderExecMain-'
    restart_exit_code: int = 3
    # Logging level for the root logger (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    # Loader messages are always emitted at CRITICAL.
    log_level: str = 'INFO'
    log_file: Optional[Path] = None
    diagnostics: tuple[str, ...] = ()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build the settings from the process environment (or an explicit mapping)."""
    diagnostics: list[str] = []
    if environ is None:
        env_file = _load_env_file(os.environ)
        if env_file is not None:
            diagnostics.append(f"loaded_env_file={env_file}")
        environ = os.environ

    home = Path(environ.get('MULTILOADER_HOME') or Path.cwd() / 'data')
    diagnostics.append(f"home_dir={home}")

    drop_dir = environ.get('MULTILOADER_DROP_DIR')
    if drop_dir:
        diagnostics.append(f"drop_dir_override={drop_dir}")
    boot_file = environ.get('MULTILOADER_BOOT_FILE')
    if boot_file:
        diagnostics.append(f"boot_file_override={boot_file}")
    self_package = environ.get('MULTILOADER_SELF_PACKAGE') or None
    if self_package:
        diagnostics.append(f"self_package_override={self_package}")
    log_file = environ.get('MULTILOADER_LOG_FILE') or None

    return Settings(
        version=environ.get('MULTILOADER_VERSION', __version__),
        home_dir=home,
        drop_dir=Path(drop_dir) if drop_dir else home / 'MultiLoaderClasspath',
        boot_file=Path(boot_file) if boot_file else home / 'bootrun',
        package_extension=environ.get('MULTILOADER_PACKAGE_EXTENSION') or '.zip',
        manifest_name=environ.get('MULTILOADER_MANIFEST_NAME') or 'plugin.yml',
        self_package=self_package,
        default_heap_size=environ.get('MULTILOADER_HEAP_SIZE') or DEFAULT_HEAP_SIZE,
        restart_exit_code=_env_int(environ, 'MULTILOADER_RESTART_EXIT_CODE', 3),
        log_level=environ.get('MULTILOADER_LOG_LEVEL', 'INFO'),
        log_file=Path(log_file) if log_file else None,
        diagnostics=tuple(diagnostics),
    )
