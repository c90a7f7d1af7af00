"""Command history.

Appends structured JSON entries to ~/.bulletlog/history.jsonl.
Each entry records one change to a bullet log (add, task, complete) with
timestamp, log file path and the entry text.
"""

import json
from datetime import datetime
from pathlib import Path

LOGS_FILE = Path.home() / ".bulletlog" / "history.jsonl"


def write_log(entry):
    """Append a history entry."""
    LOGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    entry["timestamp"] = datetime.now().isoformat()
    with open(LOGS_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry) + "\n")


def read_logs(limit=None):
    """Return history entries oldest-first, the last `limit` if given."""
    if not LOGS_FILE.exists():
        return []

    entries = []
    for line in LOGS_FILE.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            continue

    if limit is not None:
        return entries[-limit:] if limit > 0 else []
    return entries
