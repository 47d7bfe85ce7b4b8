"""
Public operations of infotag.

Every function here returns a Result instead of raising: batch callers
inspect ``result.success`` and move on to the next item. Warnings and the
last error are also kept in a per-thread diagnostics log that is drained
with flush_warnings() and read with get_last_error().
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .core import build_frames, read_frames, store_field
from .errors import InfoTagError
from .operations import extract_fields, substitute_fields

logger = logging.getLogger(__name__)

# ---------- Results ----------
@dataclass
class Result:
    """Outcome of a public operation."""
    success: bool
    value: Any = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        # a successful parse may legitimately have value 0
        return self.success

# ---------- Diagnostics ----------
class Diagnostics(threading.local):
    """Last error and warning log, one instance per thread."""

    def __init__(self):
        self.last_error = ''
        self.warnings = []

    def record(self, result: Result) -> None:
        self.warnings.extend(result.warnings)
        if not result.success:
            self.last_error = result.error_message

    def flush(self) -> List[str]:
        warns = self.warnings
        self.warnings = []
        return warns

_diagnostics = Diagnostics()

def flush_warnings() -> List[str]:
    """
    Return the warnings produced by the calls of this thread and clear them.

    Warnings do not mean that something went wrong, they report things the
    caller might not expect, e.g. a truncated value.
    """
    return _diagnostics.flush()

def get_last_error() -> str:
    """Return the description of the last error of this thread ('' if none). Reading does not reset it."""
    return _diagnostics.last_error

def _run(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Result:
    """Call a strict operation with a fresh warning list and wrap the outcome."""
    warnings = []
    try:
        value = operation(*args, warnings=warnings, **kwargs)
        result = Result(success=True, value=value, warnings=warnings)
    except InfoTagError as e:
        logger.debug(f"{operation.__name__} failed ({e.kind}): {e}")
        result = Result(
            success=False,
            error_kind=e.kind,
            error_message=str(e),
            warnings=warnings
        )
    _diagnostics.record(result)
    return result

# ---------- Operations ----------
def set_field(tag: Any, name: str, value: Any) -> Result:
    """
    Set a field of a tag after checking its value.

    Text values longer than the field allows are truncated with a warning.
    On success ``result.value`` is the value actually stored.
    """
    return _run(store_field, tag, name, value)

def parse_into_record(
    source: str,
    pattern: str,
    tag: Any,
    case: Optional[int] = None,
    weed: Optional[str] = None
) -> Result:
    """
    Set the fields of a tag from a string (usually a filename without extension).

    ``result.value`` is the number of fields written. A pattern made only of
    ((IGNORE)) placeholders succeeds with 0, which is different from failure
    (``result.success`` is False and ``result.value`` None).

    Example:
        >>> tag = create_empty()
        >>> result = parse_into_record('[02] Iron Maiden - Rainmaker',
        ...                            '[((TRACKNUM))] ((ARTIST)) - ((TITLE))', tag, case=0)
        >>> result.value, tag['ARTIST']
        (3, 'iron maiden')
    """
    return _run(extract_fields, source, pattern, tag, case=case, weed=weed)

def render_from_record(pattern: str, tag: Any, case: Optional[int] = None) -> Result:
    """
    Generate a string from a tag; every ((FIELD)) of the pattern is replaced
    by the field's value. ``result.value`` holds the string.
    """
    return _run(substitute_fields, pattern, tag, case=case)

def tag_from_frames(tags: Any) -> Result:
    """Build a tag from a mutagen ID3 object; ``result.value`` is the new tag."""
    return _run(read_frames, tags)

def tag_to_frames(tag: Any) -> Result:
    """Convert a tag into mutagen ID3 frames; ``result.value`` is the frame list."""
    return _run(_frames, tag)

def _frames(tag: Any, warnings: List[str]) -> list:
    return build_frames(tag)
