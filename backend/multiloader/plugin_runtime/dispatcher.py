from __future__ import annotations

import enum
import logging
import queue
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from multiloader.core.errors import EntryPointInvocationError, EntryPointResolutionError, MetadataMissingError
from multiloader.plugin_runtime.manifest import describe_package
from multiloader.plugin_runtime.resolver import EntryPointResolver, ResolvedEntryPoint
from multiloader.plugin_runtime.scanner import ModulePackage

_log = logging.getLogger(__name__)


class DispatchOutcome(str, enum.Enum):
    STARTED = 'started'
    MISSING_ENTRY_POINT = 'missing_entry_point'
    RESOLUTION_FAILED = 'resolution_failed'
    INVOCATION_FAILED = 'invocation_failed'
    EXECUTION_THREW = 'execution_threw'
    COMPLETED = 'completed'


@dataclass(frozen=True)
class DispatchReport:
    package: ModulePackage
    outcome: DispatchOutcome
    entry_point: Optional[str] = None
    thread_name: Optional[str] = None
    error: Optional[BaseException] = None


class ModuleDispatcher:
    """Starts one thread per ready package and never waits for any of them.

    Reports for resolution failures and started threads are returned right
    away. When `results` is given, every started thread also puts exactly one
    terminal report on it (COMPLETED, INVOCATION_FAILED or EXECUTION_THREW).
    """

    def __init__(
        self,
        resolver: EntryPointResolver,
        *,
        thread_name_prefix: str = 'MultiLoaderExecMain-',
        results: Optional[queue.Queue] = None,
    ):
        self.resolver = resolver
        self.thread_name_prefix = thread_name_prefix
        self.results = results

    def dispatch(self, packages: Sequence[ModulePackage], args: Sequence[str]) -> List[DispatchReport]:
        argv = tuple(args)
        reports: List[DispatchReport] = []
        for index, package in enumerate(packages):
            manifest = None
            try:
                manifest = self.resolver.read_manifest(package)
                resolved = self.resolver.resolve(package, manifest)
            except MetadataMissingError as e:
                _log.critical(
                    "Cannot execute the following package because it is missing an entry point: %s", package.path
                )
                reports.append(DispatchReport(package, DispatchOutcome.MISSING_ENTRY_POINT, error=e))
                continue
            except EntryPointResolutionError as e:
                _log.critical(
                    "Cannot execute the following package because entry point '%s' could not be found or loaded: %s",
                    e.entry_point, describe_package(package.path, manifest), exc_info=True,
                )
                reports.append(DispatchReport(package, DispatchOutcome.RESOLUTION_FAILED, entry_point=e.entry_point, error=e))
                continue
            thread_name = f"{self.thread_name_prefix}{index}"
            self._start(thread_name, resolved, argv)
            reports.append(DispatchReport(package, DispatchOutcome.STARTED, entry_point=resolved.identifier, thread_name=thread_name))
        return reports

    def _start(self, thread_name: str, resolved: ResolvedEntryPoint, argv: tuple) -> None:
        thread = threading.Thread(
            target=self._run,
            args=(resolved, argv),
            name=thread_name,
            daemon=False,
        )
        thread.start()

    def _run(self, resolved: ResolvedEntryPoint, argv: tuple) -> None:
        package, identifier = resolved.package, resolved.identifier
        thread_name = threading.current_thread().name
        _log.critical("Starting %s...", resolved.description)
        try:
            resolved.entry.invoke(list(argv))
        except EntryPointInvocationError as e:
            _log.critical(
                "Unable to invoke entry point '%s' from package: %s", identifier, resolved.description, exc_info=True
            )
            self._report(DispatchReport(package, DispatchOutcome.INVOCATION_FAILED, identifier, thread_name, e))
        except BaseException as e:  # noqa: BLE001 - module failures stop at the thread boundary
            _log.critical(
                "Could not successfully execute entry point '%s' of package '%s' due to an exception.",
                identifier, resolved.description, exc_info=True,
            )
            self._report(DispatchReport(package, DispatchOutcome.EXECUTION_THREW, identifier, thread_name, e))
        else:
            _log.critical("Finished %s", resolved.description)
            self._report(DispatchReport(package, DispatchOutcome.COMPLETED, identifier, thread_name))

    def _report(self, report: DispatchReport) -> None:
        if self.results is None:
            return
        self.results.put_nowait(report)
