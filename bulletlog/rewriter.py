"""Atomic rewrites of the bullet log.

Both mutating operations stream the current file line by line into a
temporary file next to it, then os.replace() it over the original. Readers
only ever see the old or the new content; a failed rewrite leaves the
original untouched and removes the temporary file.

Adding an entry is driven by a small state machine:

    BEFORE_MATCH  scanning for the section the entry belongs to
    IN_SECTION    inside the section dated exactly like the entry; trailing
                  blank lines are held back so the entry lands after the
                  section's last line instead of above the next header
    PASS_THROUGH  entry written, copy the rest verbatim
"""

import itertools
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from bulletlog.entry import Mark, format_entry, parse_entry
from bulletlog.errors import LogFileError, MalformedHeaderError, TaskIndexError
from bulletlog.header import format_header, try_parse_header


class Phase(Enum):
    BEFORE_MATCH = "before_match"
    IN_SECTION = "in_section"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class InsertState:
    phase: Phase = Phase.BEFORE_MATCH
    held: tuple = ()
    has_entries: bool = False


_DONE = InsertState(Phase.PASS_THROUGH)


def _is_blank(line):
    return not line.strip()


def new_section(day, entry):
    """Lines for a fresh section holding a single entry."""
    return [format_header(day), "\n", entry, "\n"]


def _close_section(state, entry):
    if state.has_entries:
        return [entry, *(state.held or ("\n",))]
    # Header with no entries yet: keep its blank separator above the entry.
    return [*(state.held[:1] or ("\n",)), entry, *(state.held[1:] or ("\n",))]


def advance(state, line, header_date, target, entry):
    """Feed one line to the insertion state machine.

    `header_date` is the parsed date when `line` is a section header, else
    None. Returns (lines to write, next state).
    """
    if state.phase is Phase.PASS_THROUGH:
        return [line], state

    if state.phase is Phase.IN_SECTION:
        if header_date is not None:
            return [*_close_section(state, entry), line], _DONE
        if _is_blank(line):
            return [], replace(state, held=state.held + (line,))
        return [*state.held, line], replace(state, held=(), has_entries=True)

    if header_date is None or target < header_date:
        return [line], state
    if target == header_date:
        return [line], InsertState(Phase.IN_SECTION)
    # Sections are newest first, so the entry's section goes right here.
    return [*new_section(target, entry), line], _DONE


def finish(state, target, entry, separated=True):
    """Lines to write once the input is exhausted.

    `separated` tells whether the input ended with a blank line.
    """
    if state.phase is Phase.IN_SECTION:
        return _close_section(state, entry)
    if state.phase is Phase.BEFORE_MATCH:
        lines = new_section(target, entry)
        return lines if separated else ["\n", *lines]
    return []


@contextmanager
def _atomic_rewrite(path):
    """Yield (source, temp) file handles; replace `path` with temp on success."""
    try:
        src = open(path, encoding="utf-8", newline="")
    except OSError as e:
        raise LogFileError(f"Cannot open {path}: {e}") from e

    with src:
        try:
            tmp = tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                newline="",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            )
        except OSError as e:
            raise LogFileError(f"Cannot create temporary file next to {path}: {e}") from e

        tmp_path = Path(tmp.name)
        try:
            with tmp:
                yield src, tmp
            shutil.copymode(path, tmp_path)
            os.replace(tmp_path, path)
        except UnicodeDecodeError as e:
            raise LogFileError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise LogFileError(f"Cannot rewrite {path}: {e}") from e
        finally:
            tmp_path.unlink(missing_ok=True)


def add_entry(path, day, mark, body):
    """Insert a note or task into the section for `day`. Returns the Entry."""
    path = Path(path)
    entry_line = format_entry(mark, body)

    with _atomic_rewrite(path) as (src, dst):
        first = src.readline()
        if not first:
            dst.writelines(new_section(day, entry_line))
            return parse_entry(entry_line)

        if try_parse_header(first) is None:
            raise MalformedHeaderError(
                f"{path}: first line is not a '## YYYYMMDD' header: {first.rstrip()!r}"
            )

        state = InsertState()
        line = first
        for line in itertools.chain([first], src):
            # Only pad a missing final newline when more output follows it.
            if not line.endswith("\n") and state.phase is not Phase.PASS_THROUGH:
                line += "\n"
            lines, state = advance(state, line, try_parse_header(line), day, entry_line)
            dst.writelines(lines)
        dst.writelines(finish(state, day, entry_line, separated=_is_blank(line)))

    return parse_entry(entry_line)


def parse_task_index(text):
    """Convert user input to a task index. Raises TaskIndexError."""
    try:
        index = int(text)
    except (TypeError, ValueError):
        raise TaskIndexError(f"Task index must be a non-negative integer, got {text!r}") from None
    if index < 0:
        raise TaskIndexError(f"Task index must be a non-negative integer, got {text!r}")
    return index


def complete_task(path, index):
    """Mark the `index`-th pending task (0-based, file order) as done.

    Returns the Entry that was completed, or None when there is no such task;
    the file is left unchanged in that case.
    """
    path = Path(path)
    completed = None
    seen = 0

    with _atomic_rewrite(path) as (src, dst):
        for line in src:
            if line.startswith(Mark.TASK.prefix):
                if seen == index:
                    line = Mark.DONE.prefix + line[len(Mark.TASK.prefix):]
                    completed = parse_entry(line)
                seen += 1
            dst.write(line)

    return completed

