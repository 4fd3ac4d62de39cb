#!/usr/bin/env python3
"""
Shared utilities for the IronList CLI: configuration and file access.

Configuration via environment variables:
- IRONLIST_FILE: Path to the todo file (used when --file is not given)
- IRONLIST_DEFAULT_CONFIG: Path to the saved-default file (~/.ironlist_default)
- IRONLIST_WRAP_WIDTH: Description column width (default 30)
- IRONLIST_LOG_LEVEL: Logging level name (default INFO)
"""

import logging
import os
import stat
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = ".ironlist_default"
DEFAULT_WRAP_WIDTH = 30


class ConfigError(RuntimeError):
    """The data file could not be determined."""


@dataclass(frozen=True)
class IronListConfig:
    """Resolved settings handed to the command handlers."""
    data_file: Path
    wrap_width: int = DEFAULT_WRAP_WIDTH
    show_all: bool = False
    strict: bool = False


def _env_path(name: str) -> Path | None:
    raw_value = os.getenv(name)
    if not raw_value:
        return None
    cleaned = raw_value.strip()
    if not cleaned:
        return None
    return Path(cleaned).expanduser()


def default_config_path() -> Path:
    """Where --set-default stores the saved path."""
    return _env_path('IRONLIST_DEFAULT_CONFIG') or Path.home() / DEFAULT_CONFIG_NAME


def _config_candidates() -> list[Path]:
    # Home (or override) first, then the current directory.
    return [default_config_path(), Path(DEFAULT_CONFIG_NAME)]


def wrap_width_from_env() -> int:
    raw = os.getenv('IRONLIST_WRAP_WIDTH')
    if not raw:
        return DEFAULT_WRAP_WIDTH
    try:
        width = int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid IRONLIST_WRAP_WIDTH: {raw}")
        return DEFAULT_WRAP_WIDTH
    return width if width > 0 else DEFAULT_WRAP_WIDTH


def log_level_from_env() -> int:
    name = os.getenv('IRONLIST_LOG_LEVEL', 'INFO').strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


# -------------------- saved default --------------------

def read_saved_default() -> Path | None:
    """Return the saved default data file, or None."""
    for cfg in _config_candidates():
        if not cfg.is_file():
            continue
        saved = cfg.read_text(encoding='utf-8').strip()
        if saved:
            return Path(saved).expanduser()
    return None


def persist_default_path(path: Path) -> Path:
    """Save path, made absolute, as the default data file; returns the config file written."""
    path = Path(os.path.abspath(Path(path).expanduser()))
    cfg = default_config_path()
    cfg.parent.mkdir(parents=True, exist_ok=True)
    cfg.write_text(f"{path}\n", encoding='utf-8')
    return cfg


def clear_saved_default() -> bool:
    """Remove the saved default. Returns True when a file was removed."""
    for cfg in _config_candidates():
        if cfg.is_file():
            cfg.unlink()
            return True
    return False


def prompt(message: str) -> str:
    print(message, file=sys.stderr)
    try:
        return input()
    except EOFError:
        return ''


def ask_for_default_file() -> Path:
    """Prompt for a data file on first run and save it as the default."""
    if not sys.stdin.isatty():
        raise ConfigError(
            "No data file configured; pass --file, set IRONLIST_FILE or run --set-default PATH"
        )
    entered = prompt("No default data file configured. Please enter the path to your ironlist file:").strip()
    if not entered:
        raise ConfigError("No path entered")
    path = Path(os.path.abspath(Path(entered).expanduser()))
    persist_default_path(path)
    return path


def resolve_data_file(explicit: str | Path | None = None) -> Path:
    """
    Pick the data file.

    Precedence: explicit --file, then IRONLIST_FILE, then the saved
    default, then an interactive prompt (TTY only).
    """
    if explicit:
        return Path(explicit).expanduser()
    from_env = _env_path('IRONLIST_FILE')
    if from_env:
        return from_env
    saved = read_saved_default()
    if saved:
        return saved
    return ask_for_default_file()


def load_config(file: str | Path | None = None, show_all: bool = False,
                strict: bool = False, width: int | None = None) -> IronListConfig:
    data_file = resolve_data_file(file)
    logger.debug(f"Using data file: {data_file}")
    return IronListConfig(
        data_file=data_file,
        wrap_width=width if width and width > 0 else wrap_width_from_env(),
        show_all=show_all,
        strict=strict,
    )


# -------------------- storage --------------------

def load_lines(path: Path) -> list[str]:
    """
    Read the data file as raw lines; a missing file reads as empty.

    Invalid UTF-8 is kept with errors='surrogateescape' so the parser can
    reject that line alone and a rewrite restores its original bytes.
    """
    if not path.exists():
        logger.debug(f"Data file not found, treating as empty: {path}")
        return []
    content = path.read_text(encoding='utf-8', errors='surrogateescape')
    lines = content.split('\n')
    if lines and lines[-1] == '':
        lines.pop()
    return [line.rstrip('\r') for line in lines]


def append_line(path: Path, text: str) -> None:
    """Append one line, creating the file and its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    prefix = ''
    if path.exists() and path.stat().st_size:
        with path.open('rb') as existing:
            existing.seek(-1, os.SEEK_END)
            if existing.read(1) != b'\n':
                prefix = '\n'
    with path.open('a', encoding='utf-8') as handle:
        handle.write(prefix + text + '\n')


def rewrite_all(path: Path, lines: list[str]) -> None:
    """Replace the data file content atomically via tempfile + rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = ''.join(line + '\n' for line in lines)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', errors='surrogateescape') as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        # mkstemp creates 0600; keep the data file's existing mode
        if path.exists():
            os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
