"""Module loader.

One invocation walks `Start -> Scan -> Reconcile` and then either

* persists a new boot record and asks for a relaunch when the running
  interpreter is missing any package from the drop directory, or
* starts every package's entry point on its own thread and returns without
  waiting for them.

Planning a restart supersedes dispatch: nothing is started in an invocation
that asked for a relaunch.
"""
from __future__ import annotations
import enum, logging, queue, sys
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from multiloader.core.config import Settings
from multiloader.core.runtime import RuntimeControl
from multiloader.plugin_runtime.bootconfig import BootConfigStore, BootRecord
from multiloader.plugin_runtime.dispatcher import DispatchReport, ModuleDispatcher
from multiloader.plugin_runtime.planner import RestartPlanner
from multiloader.plugin_runtime.reconciler import ReconcileReport, reconcile
from multiloader.plugin_runtime.registry import EntryPointRegistry
from multiloader.plugin_runtime.resolver import EntryPointResolver
from multiloader.plugin_runtime.scanner import ModulePackage, scan

_log = logging.getLogger(__name__)


class LoaderState(str, enum.Enum):
    DISPATCHED = 'dispatched'
    RESTART_REQUESTED = 'restart_requested'
    RESTART_UNAVAILABLE = 'restart_unavailable'


@dataclass
class LoaderResult:
    state: LoaderState
    packages: Tuple[ModulePackage, ...]
    reconcile: ReconcileReport
    boot_record: Optional[BootRecord] = None
    dispatched: Tuple[DispatchReport, ...] = field(default_factory=tuple)


class ModuleLoader:
    def __init__(
        self,
        settings: Settings,
        *,
        runtime: Optional[RuntimeControl] = None,
        planner: Optional[RestartPlanner] = None,
        dispatcher: Optional[ModuleDispatcher] = None,
        registry: Optional[EntryPointRegistry] = None,
        results: Optional[queue.Queue] = None,
    ):
        self.settings = settings
        store = BootConfigStore(settings.boot_file)
        self.runtime = runtime or RuntimeControl(store, restart_exit_code=settings.restart_exit_code)
        self.planner = planner or RestartPlanner(settings, self.runtime.store)
        self.dispatcher = dispatcher or ModuleDispatcher(
            EntryPointResolver(settings, registry),
            thread_name_prefix=settings.thread_name_prefix,
            results=results,
        )

    def run(self, args: Sequence[str] = (), active_paths: Optional[Sequence[str]] = None) -> LoaderResult:
        """Run one loader invocation; `active_paths` defaults to the current `sys.path`."""
        app = self.settings.app_name
        _log.critical("Running %s (v%s)...", app, self.settings.version)

        active = tuple(sys.path if active_paths is None else active_paths)
        packages = tuple(scan(self.settings.drop_dir, self.settings.package_extension))
        report = reconcile(active, packages)

        if not report.missing:
            dispatched = self.dispatcher.dispatch(report.ready, args)
            _log.critical("Finished running %s!", app)
            return LoaderResult(LoaderState.DISPATCHED, packages, report, dispatched=tuple(dispatched))

        record = self.planner.plan_restart(packages)
        if record is not None:
            try:
                self.runtime.configure_next_run(record)
            except (OSError, ValueError):
                _log.critical("Unable to write next run command to %s!", self.runtime.store.path, exc_info=True)
                record = None
        if record is None:
            _log.critical("Could not build restart plan; %s will not be restarted.", app)
            _log.critical("Finished running %s!", app)
            return LoaderResult(LoaderState.RESTART_UNAVAILABLE, packages, report)

        _log.critical("The %s application will be restarted to update the module search path.", app)
        _log.critical("Restarting %s!", app)
        return LoaderResult(LoaderState.RESTART_REQUESTED, packages, report, boot_record=record)
