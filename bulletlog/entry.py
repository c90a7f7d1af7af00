from dataclasses import dataclass
from enum import Enum


class Mark(str, Enum):
    NOTE = "*"
    TASK = "-"
    DONE = "x"

    @property
    def prefix(self):
        return f"{self.value} "


@dataclass(frozen=True)
class Entry:
    mark: Mark
    body: str

    def to_line(self):
        return f"{self.mark.prefix}{self.body}\n"


def format_entry(mark, body):
    """Render one entry line, newline included.

    Newlines inside the body are flattened to spaces so an entry is always
    exactly one line.
    """
    body = " ".join(body.splitlines())
    return Entry(Mark(mark), body).to_line()


def parse_entry(line):
    """Return the Entry for a note/task line, or None for any other line."""
    for mark in Mark:
        if line.startswith(mark.prefix):
            return Entry(mark, line[len(mark.prefix):].rstrip("\r\n"))
    return None
