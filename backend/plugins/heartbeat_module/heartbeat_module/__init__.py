"""Example module package.

Zip this directory's contents (plugin.yml at the archive root) into
`heartbeat_module.zip` and drop it into the loader's drop directory. On the
next launch the loader relaunches with the archive on the search path and
then runs `main` on its own thread.

Recognised arguments (everything else is ignored, other modules receive the
same list):

    --heartbeat-file PATH   append one line per beat to PATH
    --beats N               number of beats (default 3)
    --interval SECONDS      pause between beats (default 1.0)
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List

from multiloader.plugin_runtime.registry import entry_point

_log = logging.getLogger(__name__)


def _option(args: List[str], name: str, default: str | None = None) -> str | None:
    try:
        idx = args.index(name)
    except ValueError:
        return default
    if idx + 1 < len(args):
        return args[idx + 1]
    return default


@entry_point("heartbeat_module")
def main(args: List[str]) -> None:
    target = _option(args, '--heartbeat-file')
    beats = int(_option(args, '--beats', '3'))
    interval = float(_option(args, '--interval', '1.0'))
    for i in range(beats):
        line = f"beat {i + 1}/{beats}"
        _log.critical("heartbeat_module %s", line)
        if target:
            with Path(target).open('a', encoding='utf-8') as fh:
                fh.write(line + '\n')
        if i + 1 < beats:
            time.sleep(interval)
