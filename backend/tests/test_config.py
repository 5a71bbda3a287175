"""Tests for settings construction and logging setup."""

import importlib
import logging
import os
from pathlib import Path

import pydantic
import pytest

from multiloader.core.config import DEFAULT_HEAP_SIZE, Settings, load_settings
from multiloader.core.logging_config import configure_logging


class TestLoadSettings:

    def test_defaults_under_home(self, tmp_path):
        s = load_settings({"MULTILOADER_HOME": str(tmp_path)})
        assert s.home_dir == tmp_path
        assert s.drop_dir == tmp_path / "MultiLoaderClasspath"
        assert s.boot_file == tmp_path / "bootrun"
        assert s.package_extension == ".zip"
        assert s.manifest_name == "plugin.yml"
        assert s.default_heap_size == DEFAULT_HEAP_SIZE == "25M"
        assert s.self_package is None
        assert s.restart_exit_code == 3
        assert s.thread_name_prefix == "MultiLoaderExecMain-"
        assert s.loader_entry == "multiloader.entrypoint"

    def test_overrides(self, tmp_path):
        env = {
            "MULTILOADER_HOME": str(tmp_path),
            "MULTILOADER_DROP_DIR": str(tmp_path / "drop"),
            "MULTILOADER_BOOT_FILE": str(tmp_path / "jvmrun"),
            "MULTILOADER_PACKAGE_EXTENSION": ".pyz",
            "MULTILOADER_SELF_PACKAGE": "/usr/MultiLoader.zip",
            "MULTILOADER_HEAP_SIZE": "40M",
            "MULTILOADER_RESTART_EXIT_CODE": "9",
            "MULTILOADER_LOG_FILE": str(tmp_path / "loader.log"),
            "MULTILOADER_VERSION": "9.9.9",
        }
        s = load_settings(env)
        assert s.drop_dir == tmp_path / "drop"
        assert s.boot_file == tmp_path / "jvmrun"
        assert s.package_extension == ".pyz"
        assert s.self_package == "/usr/MultiLoader.zip"
        assert s.default_heap_size == "40M"
        assert s.restart_exit_code == 9
        assert s.log_file == tmp_path / "loader.log"
        assert s.version == "9.9.9"
        assert any(d.startswith("self_package_override=") for d in s.diagnostics)

    def test_bad_exit_code_falls_back(self, tmp_path):
        s = load_settings({"MULTILOADER_HOME": str(tmp_path), "MULTILOADER_RESTART_EXIT_CODE": "abc"})
        assert s.restart_exit_code == 3

    def test_config_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / "custom.env"
        env_file.write_text(f"MULTILOADER_HOME={tmp_path / 'from_env_file'}\n")
        monkeypatch.delenv("MULTILOADER_HOME", raising=False)
        monkeypatch.setenv("MULTILOADER_CONFIG_FILE", str(env_file))
        try:
            s = load_settings()
        finally:
            os.environ.pop("MULTILOADER_HOME", None)
        assert s.home_dir == tmp_path / "from_env_file"
        assert any(d.startswith("loaded_env_file=") for d in s.diagnostics)

    def test_settings_are_frozen(self):
        s = Settings()
        with pytest.raises(pydantic.ValidationError):
            s.drop_dir = Path("/elsewhere")


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for h in root.handlers:
            if h not in handlers:
                h.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_idempotent_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "loader.log"
        configure_logging("WARNING", log_file)
        count = len(logging.getLogger().handlers)
        configure_logging("WARNING", log_file)
        assert len(logging.getLogger().handlers) == count
        assert logging.getLogger().level == logging.WARNING

    def test_file_sink_receives_critical_lines(self, tmp_path):
        log_file = tmp_path / "loader.log"
        configure_logging("INFO", log_file)
        logging.getLogger("multiloader.test").critical("Loaded (ready): /d/a.zip")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "Loaded (ready): /d/a.zip" in log_file.read_text()

    def test_unknown_level_defaults_to_info(self):
        configure_logging("LOUD")
        assert logging.getLogger().level == logging.INFO


@pytest.mark.parametrize("module_name", [
    "multiloader.core.config",
    "multiloader.core.errors",
    "multiloader.core.runtime",
    "multiloader.plugin_runtime.bootconfig",
    "multiloader.plugin_runtime.loader",
    "multiloader.plugin_runtime.manifest",
    "multiloader.plugin_runtime.resolver",
])
def test_module_docstrings_present(module_name):
    module = importlib.import_module(module_name)
    assert module.__doc__ and module.__doc__.strip()
