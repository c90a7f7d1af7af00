import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from dotenv import dotenv_values

from bulletlog.errors import ConfigError, LogFileError
from bulletlog.header import parse_date_token

LOG_FILE_VAR = "BULLETLOG_FILE"
DATE_VAR = "BULLETLOG_DATE"
GLOBAL_CONFIG_FILE = Path.home() / ".bulletlog" / "config"

DEFAULT_CONFIG = {
    LOG_FILE_VAR: ".BULLETLOG",
    # Optional: BULLETLOG_DATE=YYYYMMDD pins "today"
}


@dataclass(frozen=True)
class Config:
    """Resolved once per invocation and passed to the rewriter."""

    log_file: Path
    date: date


def load_global_config():
    """Load ~/.bulletlog/config, a KEY=VALUE file with per-user defaults."""
    if GLOBAL_CONFIG_FILE.exists():
        try:
            values = dotenv_values(GLOBAL_CONFIG_FILE)
        except (OSError, UnicodeDecodeError):
            return {}
        return {k: v for k, v in values.items() if v}
    return {}


def parse_date(text):
    """Parse a YYYYMMDD override. Raises ConfigError."""
    try:
        return parse_date_token(text.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid date {text!r}: {e}") from e


def resolve_date(text=None):
    """The override date if given, else today's local date."""
    if text:
        return parse_date(text)
    return date.today()


def load_config(log_file=None, date=None, environ=None):
    # Merge order: defaults → global config → environment → explicit arguments
    environ = os.environ if environ is None else environ
    merged = {**DEFAULT_CONFIG, **load_global_config()}
    for key in (LOG_FILE_VAR, DATE_VAR):
        if environ.get(key):
            merged[key] = environ[key]
    if log_file:
        merged[LOG_FILE_VAR] = str(log_file)
    if date:
        merged[DATE_VAR] = date

    return Config(
        log_file=Path(merged[LOG_FILE_VAR]).expanduser(),
        date=resolve_date(merged.get(DATE_VAR)),
    )


def ensure_log_file(path):
    """Create an empty log at `path` if there is none yet."""
    path = Path(path)
    if path.exists():
        return path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    except OSError as e:
        raise LogFileError(f"Cannot create {path}: {e}") from e
    return path
