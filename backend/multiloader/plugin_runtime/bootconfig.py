"""Boot record codec and store.

The boot record is the single line the host reads to launch the next process:

    -heapsize 25M -classpath /a/self.zip:/b/mod.zip -emain multiloader.entrypoint

Search path entries are joined with the host's path separator (`os.pathsep`).
The store always overwrites the whole file; records are never merged.
"""
from __future__ import annotations
import os, re, tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from multiloader.core.errors import ConfigReadError

HEAPSIZE_ARG = '-heapsize'
CLASSPATH_ARG = '-classpath'
MAIN_CLASS_ARG = '-emain'
SEARCH_PATH_SEPARATOR = os.pathsep

# Groups 1, 2 and 3 hold heap size, search path and entry class.
_RECORD_RE = re.compile(
    r'^' + re.escape(HEAPSIZE_ARG) + r'\s(\S*)\s'
    + re.escape(CLASSPATH_ARG) + r'\s(\S*)\s'
    + re.escape(MAIN_CLASS_ARG) + r'\s(\S*)\n?\Z'
)


@dataclass(frozen=True)
class BootRecord:
    heap_size: str
    search_path: tuple[str, ...]
    entry_class: str

    @property
    def joined_search_path(self) -> str:
        return SEARCH_PATH_SEPARATOR.join(self.search_path)


def _split_search_path(raw: str) -> tuple[str, ...]:
    return tuple(p for p in raw.split(SEARCH_PATH_SEPARATOR) if p)


def parse_record(text: str) -> BootRecord:
    """Parse one boot record line; raise ConfigReadError unless all three fields are present."""
    m = _RECORD_RE.match(text)
    if m is None:
        raise ConfigReadError(f"boot record does not match grammar: {text!r}")
    heap, search_path, entry = m.group(1), m.group(2), m.group(3)
    if not (heap and search_path and entry):
        raise ConfigReadError(f"boot record has empty fields: {text!r}")
    return BootRecord(heap_size=heap, search_path=_split_search_path(search_path), entry_class=entry)


def format_record(record: BootRecord) -> str:
    if not record.search_path:
        raise ValueError('boot record needs at least one search path entry')
    for entry in record.search_path:
        if not entry or any(ch.isspace() for ch in entry):
            raise ValueError(f'search path entry cannot be empty or contain whitespace: {entry!r}')
    for label, value in (('heap size', record.heap_size), ('entry class', record.entry_class)):
        if not value or any(ch.isspace() for ch in value):
            raise ValueError(f'{label} cannot be empty or contain whitespace: {value!r}')
    return (
        f"{HEAPSIZE_ARG} {record.heap_size} "
        f"{CLASSPATH_ARG} {record.joined_search_path} "
        f"{MAIN_CLASS_ARG} {record.entry_class}\n"
    )


def build_record(heap_size: str, search_path: Iterable[str], entry_class: str) -> BootRecord:
    return BootRecord(heap_size=heap_size, search_path=tuple(search_path), entry_class=entry_class)


class BootConfigStore:
    """Reads and overwrites the persisted boot record file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def read(self) -> BootRecord:
        try:
            text = self.path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigReadError(f"could not read boot record {self.path}: {e}") from e
        return parse_record(text)

    def write(self, record: BootRecord) -> None:
        data = format_record(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix='.bootrun-')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as fh:
                fh.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

