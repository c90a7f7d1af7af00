from pathlib import Path

from bulletlog.entry import Mark, parse_entry
from bulletlog.errors import LogFileError


def iter_entries(path):
    """Yield every note/task Entry in file order."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                entry = parse_entry(line)
                if entry is not None:
                    yield entry
    except UnicodeDecodeError as e:
        raise LogFileError(f"{path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise LogFileError(f"Cannot read {path}: {e}") from e


def list_notes(path):
    return [e.body for e in iter_entries(path) if e.mark is Mark.NOTE]


def list_tasks(path):
    """Pending tasks as (index, body); the index is what complete_task takes."""
    tasks = [e.body for e in iter_entries(path) if e.mark is Mark.TASK]
    return list(enumerate(tasks))
