import sys
import uuid
import pathlib
import importlib
import zipfile
import pytest
import yaml

# Ensure backend root (containing the 'multiloader' package) is on sys.path
BACKEND_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from multiloader.core.config import Settings
from multiloader.plugin_runtime.registry import EntryPointRegistry


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary home with a configured self package."""
    return Settings(
        home_dir=tmp_path,
        drop_dir=tmp_path / 'MultiLoaderClasspath',
        boot_file=tmp_path / 'bootrun',
        self_package=str(tmp_path / 'MultiLoader.zip'),
    )


@pytest.fixture
def registry():
    return EntryPointRegistry()


@pytest.fixture
def module_name():
    """Factory for import names that never collide across tests."""
    def _make(prefix: str = 'mlpkg') -> str:
        return f"{prefix}_{uuid.uuid4().hex[:10]}"
    return _make


@pytest.fixture
def isolated_import_state(monkeypatch):
    """Restore sys.path and drop modules imported from test packages afterwards."""
    monkeypatch.setattr(sys, 'path', list(sys.path))
    before = set(sys.modules)
    yield
    for name in set(sys.modules) - before:
        if name.startswith('mlpkg_'):
            sys.modules.pop(name, None)
    importlib.invalidate_caches()


@pytest.fixture
def make_package(settings, isolated_import_state):
    """Build a package archive in the drop directory.

    `source` becomes `<module>/__init__.py`; `manifest` (a dict) is written as
    plugin.yml unless it is None. With `activate=True` the archive is put on
    sys.path so its module can be imported.
    """
    def _make(
        filename: str,
        *,
        module: str | None = None,
        source: str | None = None,
        manifest: dict | None = None,
        raw_manifest: str | None = None,
        activate: bool = True,
    ) -> pathlib.Path:
        settings.drop_dir.mkdir(parents=True, exist_ok=True)
        path = settings.drop_dir / filename
        with zipfile.ZipFile(path, 'w') as zf:
            if module is not None:
                zf.writestr(f"{module}/__init__.py", source or '')
            if raw_manifest is not None:
                zf.writestr(settings.manifest_name, raw_manifest)
            elif manifest is not None:
                zf.writestr(settings.manifest_name, yaml.safe_dump(manifest))
        if activate:
            sys.path.append(str(path.absolute()))
            importlib.invalidate_caches()
        return path.absolute()
    return _make
