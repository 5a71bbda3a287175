from __future__ import annotations

import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Protocol, Sequence, runtime_checkable

from multiloader.core.errors import EntryPointInvocationError

_log = logging.getLogger(__name__)


@runtime_checkable
class EntryPoint(Protocol):
    """Capability every dispatched module exposes: run with the process arguments."""

    def invoke(self, args: Sequence[str]) -> None: ...


def accepts_single_argument(fn: Callable[..., Any]) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins and some C callables expose no signature; let the call decide.
        return callable(fn)
    try:
        sig.bind(())
    except TypeError:
        return False
    return True


class CallableEntryPoint:
    """Adapts a plain `main(args)` style function to the EntryPoint protocol."""

    def __init__(self, identifier: str, fn: Callable[[List[str]], Any]):
        self.identifier = identifier
        self.fn = fn

    def invoke(self, args: Sequence[str]) -> None:
        argv = list(args)
        try:
            inspect.signature(self.fn).bind(argv)
        except TypeError as e:
            raise EntryPointInvocationError(
                f"entry point {self.identifier} cannot be called with one argument: {e}",
                entry_point=self.identifier,
            ) from e
        except ValueError:
            pass
        result = self.fn(argv)
        if isinstance(result, BaseException):
            raise result

    def __repr__(self) -> str:
        return f"CallableEntryPoint({self.identifier!r})"


def as_entry_point(identifier: str, target: Any) -> EntryPoint:
    """Wrap `target` so it satisfies EntryPoint; classes are instantiated without arguments."""
    if inspect.isclass(target):
        target = target()
    if isinstance(target, EntryPoint):
        return target
    if callable(target):
        return CallableEntryPoint(identifier, target)
    raise TypeError(f"entry point {identifier} is neither callable nor an EntryPoint")


class EntryPointRegistry:
    """Binds entry point identifiers to implementations at runtime."""

    def __init__(self):
        self._entries: Dict[str, EntryPoint] = {}
        self._lock = threading.Lock()

    def register(self, identifier: str, target: Any) -> EntryPoint:
        if not identifier:
            raise ValueError("entry point identifier is required")
        entry = as_entry_point(identifier, target)
        with self._lock:
            if identifier in self._entries:
                _log.critical("entry point %s re-registered", identifier)
            self._entries[identifier] = entry
        return entry

    def unregister(self, identifier: str) -> None:
        with self._lock:
            self._entries.pop(identifier, None)

    def get(self, identifier: str) -> EntryPoint | None:
        with self._lock:
            return self._entries.get(identifier)

    def list_ids(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())


entry_points = EntryPointRegistry()


def entry_point(identifier: str, *, registry: EntryPointRegistry | None = None):
    """Decorator registering a function or EntryPoint class under `identifier`.

    Example (inside a module package):

        @entry_point("temperature_logger.app")
        def main(args):
            ...
    """

    def _decorator(target):
        (registry or entry_points).register(identifier, target)
        return target

    return _decorator
