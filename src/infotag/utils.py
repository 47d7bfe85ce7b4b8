"""
Utility functions and configuration for infotag.
"""

import os
import re
import sys
import logging
from pathlib import Path
from typing import List, Optional, Pattern, TextIO
from logging.handlers import RotatingFileHandler

from .errors import ConfigError

# ---------- Constants ----------
EXIT_CODE_SUCCESS = 0
EXIT_CODE_ERROR = 1
EXIT_CODE_USAGE = 2
EXIT_CODE_NO_INPUT = 3
EXIT_CODE_INTERRUPTED = 130

# Case conversion modes
CASE_LOWER = 0
CASE_FIRST = 1
CASE_WORDS = 2
CASE_MODES = (CASE_LOWER, CASE_FIRST, CASE_WORDS)

# Placeholders look like ((NAME)); NAME is a run of word characters
PLACEHOLDER_RE = re.compile(r'\(\((\w+)\)\)')

# A word starts at the beginning of the line or after whitespace, '_' or '-'
_WORD_START_RE = re.compile(r'(^|[\s_-])([^\W\d_])')

# ---------- Configuration ----------
class Config:
    """Configuration management with validation."""
    DEFAULT_CASE = None
    DEFAULT_WEED = None
    TRUNC_MARKER = None
    DEFAULT_VERBOSE = False
    LOG_FILE = None

    # Multithreading configuration
    # Default: CPU count + 4, max 32 (the batch work is pure CPU on short strings)
    MAX_WORKERS = min(32, (os.cpu_count() or 1) + 4)
    MIN_ITEMS_FOR_PARALLEL = 50

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        if cls.DEFAULT_CASE is not None and cls.DEFAULT_CASE not in CASE_MODES:
            raise ValueError(f"Invalid DEFAULT_CASE: {cls.DEFAULT_CASE}")
        if cls.DEFAULT_WEED is not None:
            try:
                compile_weed(cls.DEFAULT_WEED)
            except ConfigError as e:
                raise ValueError(f"Invalid DEFAULT_WEED: {e}")
        if cls.TRUNC_MARKER is not None and not isinstance(cls.TRUNC_MARKER, str):
            raise ValueError("TRUNC_MARKER must be a string")
        if not isinstance(cls.DEFAULT_VERBOSE, bool):
            raise ValueError("DEFAULT_VERBOSE must be a boolean")
        if cls.MAX_WORKERS <= 0:
            raise ValueError("MAX_WORKERS must be positive")
        if cls.MIN_ITEMS_FOR_PARALLEL <= 0:
            raise ValueError("MIN_ITEMS_FOR_PARALLEL must be positive")

    @classmethod
    def load_from_env(cls) -> None:
        """Load configuration from environment variables, updating class attributes."""
        if os.getenv('INFOTAG_CASE'):
            try:
                cls.DEFAULT_CASE = int(os.getenv('INFOTAG_CASE'))
            except ValueError:
                raise ValueError(f"INFOTAG_CASE must be one of {CASE_MODES}")
        if os.getenv('INFOTAG_WEED'):
            cls.DEFAULT_WEED = os.getenv('INFOTAG_WEED')
        if os.getenv('INFOTAG_TRUNC_MARKER'):
            cls.TRUNC_MARKER = os.getenv('INFOTAG_TRUNC_MARKER')
        if os.getenv('INFOTAG_MAX_WORKERS'):
            cls.MAX_WORKERS = int(os.getenv('INFOTAG_MAX_WORKERS'))
        if os.getenv('INFOTAG_MIN_PARALLEL'):
            cls.MIN_ITEMS_FOR_PARALLEL = int(os.getenv('INFOTAG_MIN_PARALLEL'))
        if os.getenv('INFOTAG_LOG_FILE'):
            cls.LOG_FILE = os.getenv('INFOTAG_LOG_FILE')
        verbose_env = os.getenv('INFOTAG_VERBOSE')
        if verbose_env is not None:
            cls.DEFAULT_VERBOSE = verbose_env.strip().lower() in ('1', 'true', 'yes')
        cls.validate()

# ---------- Logging Setup ----------
def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> None:
    """
    Configure logging; a rotating log file is added only when Config.LOG_FILE is set.

    Console output goes to stream (default: stdout). Pass sys.stderr when stdout
    carries machine-readable output.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(stream or sys.stdout)]
    if Config.LOG_FILE:
        log_path = Path(Config.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        ))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

# ---------- Value Normalizer ----------
def trim(s: Optional[str], max_len: Optional[int] = None, marker: Optional[str] = None) -> Optional[str]:
    """
    Strip leading and trailing whitespace, optionally truncating to max_len.

    Args:
        s: String to trim (None is passed through)
        max_len: Maximum number of characters; None or a negative value means unbounded
        marker: Text put at the end of a truncated string (e.g. '...'), used only
            when it is shorter than max_len. The result is then exactly max_len long.

    Returns:
        The trimmed string, or None if s was None

    Examples:
        >>> trim('  Rainmaker  ')
        'Rainmaker'
        >>> trim('Fear of the Dark', 7, '..')
        'Fear ..'
    """
    if s is None:
        return None

    s = s.strip()

    if max_len is not None and 0 <= max_len < len(s):
        if marker is not None and len(marker) < max_len:
            return s[:max_len - len(marker)] + marker
        s = s[:max_len].rstrip()

    return s

def convert_case(line: Optional[str], mode: Optional[int], warnings: Optional[List[str]] = None) -> Optional[str]:
    """
    Convert the case of a line of text.

    Modes:
        0  all characters in lower case
        1  Capitalize the first character, the rest will be lower case
        2  Capitalize The First Character Of Each Word, Even_This-Way

    An unknown mode leaves the line untouched and adds a warning.
    """
    if line is None:
        return None

    if mode is None:
        return line

    if mode not in CASE_MODES:
        if warnings is not None:
            warnings.append(f"convert_case: ignoring unknown conversion mode '{mode}'")
        return line

    line = line.lower()
    if mode == CASE_FIRST:
        line = line[:1].upper() + line[1:]
    elif mode == CASE_WORDS:
        line = _WORD_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), line)
    return line

def normalize_pattern(pattern: Optional[str]) -> Optional[str]:
    """Upper-case the placeholder names, e.g. "((tracknum))_((title))" -> "((TRACKNUM))_((TITLE))"."""
    if pattern is None:
        return None
    return PLACEHOLDER_RE.sub(lambda m: m.group(0).upper(), pattern)

def compile_weed(expr: str) -> Pattern:
    """Compile a weed expression, checking it with a trial substitution first."""
    try:
        weed = re.compile(expr)
        weed.sub(' ', 'test')
    except (re.error, TypeError) as e:
        # repr() keeps control characters out of the message
        raise ConfigError(f"weed argument seems to be no valid regular expression: {repr(expr)} ({e})")
    return weed

# ---------- Small Helpers ----------
def join_for_printing(lst: List[str]) -> str:
    """Join list for display, showing '(none)' for empty lists."""
    return '(none)' if not lst else '; '.join(lst)

def filename_stem(name: str) -> str:
    """Return the base name without directory and extension: 'a/02 - X.mp3' -> '02 - X'."""
    return os.path.splitext(os.path.basename(name))[0]
