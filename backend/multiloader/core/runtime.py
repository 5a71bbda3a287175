"""Runtime helpers for handing the next launch over to the host supervisor.

The loader cannot widen the search path of a running interpreter. Instead it
persists the next-run boot record and exits with a dedicated code; whatever
supervises the process relaunches it with that record.
"""
from __future__ import annotations

import logging

from multiloader.plugin_runtime.bootconfig import BootConfigStore, BootRecord

_log = logging.getLogger(__name__)


class RestartRequested(SystemExit):
    """Raised to end the current process so the supervisor relaunches it."""


class RuntimeControl:
    def __init__(self, store: BootConfigStore, *, restart_exit_code: int = 3) -> None:
        self.store = store
        self.restart_exit_code = restart_exit_code
        self.pending_record: BootRecord | None = None

    def configure_next_run(self, record: BootRecord) -> None:
        """Persist the record the next launch should use (overwrites the previous one)."""
        self.store.write(record)
        self.pending_record = record
        _log.critical("Configured next run: %s", self.store.path)

    def request_restart(self) -> None:
        """Terminate the current process instance; never returns."""
        if self.pending_record is None:
            raise RuntimeError("restart requested before a next-run record was configured")
        _log.critical("Requesting relaunch (exit code %d)", self.restart_exit_code)
        raise RestartRequested(self.restart_exit_code)
