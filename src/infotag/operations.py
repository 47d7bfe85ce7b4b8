"""
Pattern engine: string -> tag and tag -> string conversion for infotag.

A pattern such as ``[((TRACKNUM))] ((ARTIST)) - ((TITLE))`` consists of
placeholders ``((NAME))`` and the literal separators between them. Separators
are matched verbatim, never as regular expressions.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import List, NamedTuple, Optional

from .core import IGNORE, TAG_FIELDS, is_field, store_field
from .errors import (
    AmbiguityError,
    ConfigError,
    InvalidArgument,
    MatchError,
    MissingValueError,
    PatternError,
    ValidationError,
)
from .utils import CASE_MODES, PLACEHOLDER_RE, compile_weed, convert_case, normalize_pattern, trim

logger = logging.getLogger(__name__)

# ---------- Type Definitions ----------
LITERAL = 'literal'
PLACEHOLDER = 'placeholder'

class Token(NamedTuple):
    """One part of a compiled pattern: a literal separator or a placeholder name."""
    kind: str
    text: str

def placeholder(name: str) -> str:
    return f"(({name}))"

# ---------- Compilation ----------
def compile_pattern(pattern: str) -> List[Token]:
    """
    Split a pattern into alternating literal and placeholder tokens.

    Placeholder names are upper-cased; empty literals (between adjacent
    placeholders, or at either end) are not emitted.

    Examples:
        >>> compile_pattern('((tracknum))_((title))')
        [Token(kind='placeholder', text='TRACKNUM'), Token(kind='literal', text='_'), Token(kind='placeholder', text='TITLE')]
    """
    pattern = normalize_pattern(pattern)
    tokens = []
    pos = 0
    for m in PLACEHOLDER_RE.finditer(pattern):
        if m.start() > pos:
            tokens.append(Token(LITERAL, pattern[pos:m.start()]))
        tokens.append(Token(PLACEHOLDER, m.group(1)))
        pos = m.end()
    if pos < len(pattern):
        tokens.append(Token(LITERAL, pattern[pos:]))
    return tokens

# ---------- String -> Tag ----------
def extract_fields(
    source: str,
    pattern: str,
    tag: MutableMapping,
    case: Optional[int] = None,
    weed: Optional[str] = None,
    warnings: Optional[List[str]] = None
) -> int:
    """
    Set the fields of a tag from the information contained in a string.

    The string is scanned left to right. Every separator is looked up at its
    first occurrence after the current position; the text in front of it
    belongs to the placeholder before the separator. A placeholder at the end
    of the pattern takes the rest of the string, unless that rest contains a
    separator that was already used, in which case the string most likely
    does not match the pattern.

    Args:
        source: String holding the information, usually a filename without extension
        pattern: Placeholder pattern describing the format of source
        tag: Tag to update; fields not mentioned in the pattern are kept
        case: Optional case conversion mode (0, 1 or 2) applied to each value
        weed: Optional regular expression; matches are replaced by a space
            before case conversion
        warnings: List that receives warnings (truncated values etc.)

    Returns:
        Number of fields written (IGNORE placeholders are not counted)

    Raises:
        InvalidArgument, PatternError, ConfigError, MatchError, AmbiguityError,
        ValidationError. The tag is only updated when no error occurs.
    """
    if warnings is None:
        warnings = []

    name = trim(source) if isinstance(source, str) else None
    if not name:
        raise InvalidArgument('str argument must contain a non-empty string')
    pattern = normalize_pattern(trim(pattern)) if isinstance(pattern, str) else None
    if not pattern or not PLACEHOLDER_RE.search(pattern):
        raise PatternError('pattern argument must contain at least one placeholder')
    if not isinstance(tag, MutableMapping):
        raise InvalidArgument('tag argument must be a mutable mapping')
    if case is not None and case not in CASE_MODES:
        raise ConfigError(f"case argument must be one out of {CASE_MODES}")
    weed_re = compile_weed(weed) if weed is not None else None

    # work on a copy so that a failing string leaves the caller's tag untouched
    scratch = dict(tag)
    changed = 0

    def assign(field: str, value: str) -> None:
        nonlocal changed
        if field == IGNORE:
            return
        if weed_re is not None:
            value = weed_re.sub(' ', value)
        value = convert_case(value, case, warnings)
        store_field(scratch, field, value, warnings)
        changed += 1

    cursor = 0
    pending = None
    used_separators = []

    for token in compile_pattern(pattern):
        if token.kind == PLACEHOLDER:
            if pending is not None:
                raise PatternError(
                    f"two placeholders must be separated by at least one character; "
                    f"problem occurred at '{placeholder(token.text)}'"
                )
            if not (is_field(token.text) or token.text == IGNORE):
                raise PatternError(f"unknown placeholder: '{placeholder(token.text)}'")
            pending = token.text
            continue

        used_separators.append(token.text)
        found = name.find(token.text, cursor)
        if found < 0:
            raise MatchError(f"separator not found: '{token.text}'")
        if pending is not None:
            assign(pending, name[cursor:found])
            pending = None
        cursor = found + len(token.text)

    if pending is not None:
        remainder = name[cursor:]
        if not remainder:
            raise PatternError(f"no characters found at position of placeholder {pending}")
        for separator in used_separators:
            if separator in remainder:
                raise AmbiguityError(
                    f"guessing that this string does not match pattern because '{pending}' "
                    f"would be '{remainder}' but this contains '{separator}' which was "
                    f"used as separator before"
                )
        assign(pending, remainder)

    tag.update(scratch)
    logger.debug(f"Extracted {changed} field(s) from '{name}'")
    return changed

# ---------- Tag -> String ----------
def substitute_fields(
    pattern: str,
    tag: Mapping,
    case: Optional[int] = None,
    warnings: Optional[List[str]] = None
) -> str:
    """
    Generate a string from a tag by replacing the placeholders of a pattern.

    TRACKNUM is zero-padded to two digits. Fields that fill their maximum
    length produce a warning because they were probably truncated on creation.
    An unknown case mode only produces a warning.

    Raises:
        InvalidArgument: pattern is not a string or tag is not a mapping
        ValidationError: TRACKNUM holds a non-numeric value
        MissingValueError: a field used by the pattern is empty
    """
    if warnings is None:
        warnings = []
    if not isinstance(tag, Mapping):
        raise InvalidArgument('tag argument must be a mapping')
    if not isinstance(pattern, str):
        raise InvalidArgument('pattern argument must be a string')

    pattern = normalize_pattern(pattern)
    used = set(pattern_fields(pattern))
    values = {}
    empty_fields = []

    for spec in TAG_FIELDS:
        if spec.name not in used:
            continue

        value = tag.get(spec.name)
        value = trim(str(value)) if value is not None else ''
        if not value:
            empty_fields.append(spec.name)
            continue

        if spec.max_length is not None and spec.name != 'YEAR' and len(value) == spec.max_length:
            warnings.append(
                f"render_from_record: value of {spec.name} has maximum length, "
                f"you should check if it is truncated: '{value}'"
            )
        if spec.name == 'TRACKNUM':
            digits = value.lstrip('0')
            if not value.isdecimal() or len(digits) > 3:
                raise ValidationError(f"field TRACKNUM must be a number below 1000, got '{value}'")
            value = f"{int(digits or '0'):02d}"
        values[spec.name] = value

    if empty_fields:
        raise MissingValueError(
            f"found empty tag field(s) required by your pattern: {', '.join(empty_fields)}"
        )

    # one pass, so placeholder text inside a value is never substituted again
    result = PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1), m.group(0)), pattern)
    return convert_case(result, case, warnings)

# ---------- Helpers ----------
def pattern_fields(pattern: str) -> List[str]:
    """Return the schema fields a pattern refers to, in pattern order, without duplicates."""
    seen = []
    for token in compile_pattern(pattern or ''):
        if token.kind == PLACEHOLDER and is_field(token.text) and token.text not in seen:
            seen.append(token.text)
    return seen
