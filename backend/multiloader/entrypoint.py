from __future__ import annotations
import sys
from typing import Optional, Sequence

from multiloader.core.config import Settings, load_settings
from multiloader.core.logging_config import configure_logging
from multiloader.plugin_runtime.loader import LoaderResult, LoaderState, ModuleLoader


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> LoaderResult:
    """Process entry: arguments are forwarded verbatim to every dispatched module."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_file)
    print(
        f"[entrypoint] starting version={settings.version} drop_dir={settings.drop_dir} "
        f"boot_file={settings.boot_file}",
        flush=True,
    )
    for line in settings.diagnostics:
        print(f"[entrypoint][config] {line}", flush=True)

    loader = ModuleLoader(settings)
    result = loader.run(args)
    if result.state is LoaderState.RESTART_REQUESTED:
        # Ends this process; the supervisor relaunches with the new boot record.
        loader.runtime.request_restart()
    return result


def cli() -> int:
    """Console script wrapper; a requested restart leaves through SystemExit."""
    main()
    return 0


if __name__ == '__main__':  # pragma: no cover
    main()
