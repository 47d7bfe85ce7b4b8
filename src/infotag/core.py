"""
Tag schema and record operations.

A tag is a plain dict mapping the ID3v1 field names to strings. ID3v2 tags are
not supported; TRACKNUM turns a tag into an ID3v1.1 tag, which costs the
COMMENT field two characters.
"""

import re
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, List, NamedTuple, Optional

import mutagen.id3 as id3

from .errors import InvalidArgument, ValidationError
from .utils import Config, trim

logger = logging.getLogger(__name__)


class FieldSpec(NamedTuple):
    """A tag field and its maximum number of characters (None = unbounded)."""
    name: str
    max_length: Optional[int]


# Valid tag fields in their recommended display order
TAG_FIELDS = (
    FieldSpec('TITLE', 30),
    FieldSpec('ARTIST', 30),
    FieldSpec('ALBUM', 30),
    FieldSpec('YEAR', 4),
    FieldSpec('COMMENT', 30),
    FieldSpec('TRACKNUM', None),
    FieldSpec('GENRE', None),
)

_FIELD_LOOKUP = {spec.name: spec for spec in TAG_FIELDS}

# Pseudo-field: the matching part of a string is dropped
IGNORE = 'IGNORE'

# An ID3v1.1 track number occupies the last two bytes of the comment
TRACKNUM_COMMENT_RESERVE = 2

_YEAR_RE = re.compile(r'[0-9]{4}')
# leading zeros are allowed, the value itself has at most three digits
_TRACKNUM_RE = re.compile(r'0*([0-9]{1,3})')

# ID3v2 frames holding the ID3v1 fields, as used by mutagen
FRAME_IDS = {
    'TITLE': 'TIT2',
    'ARTIST': 'TPE1',
    'ALBUM': 'TALB',
    'YEAR': 'TDRC',
    'COMMENT': 'COMM',
    'TRACKNUM': 'TRCK',
    'GENRE': 'TCON',
}

# ---------- Schema ----------
def get_field_table() -> Dict[str, Optional[int]]:
    """Return a new dict of all valid field names and their maximum lengths."""
    return {spec.name: spec.max_length for spec in TAG_FIELDS}

def get_field_names() -> List[str]:
    """Return a new list of all valid field names in display order."""
    return [spec.name for spec in TAG_FIELDS]

def is_field(name: Any) -> bool:
    return isinstance(name, str) and name in _FIELD_LOOKUP

def max_length(name: str) -> Optional[int]:
    return _FIELD_LOOKUP[name].max_length

# ---------- Records ----------
def create_empty() -> Dict[str, str]:
    """Return a tag whose fields are all empty strings."""
    return {spec.name: '' for spec in TAG_FIELDS}

def render(tag: Any, show_empty: bool = False) -> str:
    """
    Create a string representation of a tag, e.g. "TITLE: Rainmaker / TRACKNUM: 02".

    Empty fields are suppressed unless show_empty is set.
    """
    if not isinstance(tag, Mapping):
        return 'no tag mapping given'

    parts = []
    for spec in TAG_FIELDS:
        value = tag.get(spec.name) or ''
        if show_empty or value:
            parts.append(f"{spec.name}: {value}")
    return ' / '.join(parts)

def store_field(tag: MutableMapping, field: str, value: Any, warnings: List[str]) -> str:
    """
    Validate a value and write it to a tag field.

    Text fields are truncated to their maximum length (with Config.TRUNC_MARKER
    if one is configured) and a warning is appended to ``warnings``. YEAR and
    TRACKNUM are checked strictly. Setting TRACKNUM shrinks an existing COMMENT,
    setting COMMENT while TRACKNUM is present applies the shrink immediately.

    Returns:
        The value actually stored

    Raises:
        InvalidArgument: tag is not a mapping, field is unknown or value is None
        ValidationError: YEAR or TRACKNUM value is malformed
    """
    if not isinstance(tag, MutableMapping):
        raise InvalidArgument('tag argument must be a mutable mapping')
    if not is_field(field) or value is None:
        raise InvalidArgument('valid field and some value must be given')

    value = trim(str(value))

    if field == 'YEAR':
        if not _YEAR_RE.fullmatch(value):
            raise ValidationError('field YEAR must be a 4-digit number')

    elif field == 'TRACKNUM':
        m = _TRACKNUM_RE.fullmatch(value)
        if not (m and 0 < int(m.group(1)) < 256):
            raise ValidationError('field TRACKNUM must be a number between 1 and 255')

        comment = tag.get('COMMENT')
        if comment:
            # implicit conversion to a v1.1 tag
            shortened = trim(comment, max_length('COMMENT') - TRACKNUM_COMMENT_RESERVE, Config.TRUNC_MARKER)
            tag['COMMENT'] = shortened
            if shortened != comment:
                warnings.append(
                    f"set_field: value of COMMENT must be truncated to '{shortened}' "
                    f"due to addition of TRACKNUM field"
                )

    else:
        field_length = max_length(field)
        if field == 'COMMENT' and tag.get('TRACKNUM'):
            field_length -= TRACKNUM_COMMENT_RESERVE
        new_value = trim(value, field_length, Config.TRUNC_MARKER)
        if new_value != value:
            warnings.append(f"set_field: value of {field} must be truncated to '{new_value}'")
        value = new_value

    tag[field] = value
    return value

# ---------- mutagen frames ----------
def read_frames(tags: Any, warnings: List[str]) -> Dict[str, str]:
    """
    Build a tag from the ID3 frames of a mutagen tag object (anything with getall()).

    Values that do not fit the ID3v1 schema are skipped with a warning.
    """
    if not hasattr(tags, 'getall'):
        raise InvalidArgument('tags argument must provide getall(), e.g. mutagen.id3.ID3')

    tag = create_empty()
    for spec in TAG_FIELDS:
        frame_id = FRAME_IDS[spec.name]
        value = ''
        # ID3 can hold several COMM frames (one per language); take the first with text
        for frame in tags.getall(frame_id):
            texts = [str(x) for x in getattr(frame, 'text', []) if str(x).strip()]
            if texts:
                value = texts[0].strip()
                break
        if not value:
            continue

        if spec.name == 'TRACKNUM':
            # stored as "N/Total"
            value = value.split('/')[0]
        elif spec.name == 'YEAR':
            # ID3v2.4 timestamps: "2004-05-17T12:00"
            value = value[:4]

        try:
            store_field(tag, spec.name, value, warnings)
        except ValidationError as e:
            warnings.append(f"read_frames: skipping {frame_id} value '{value}': {e}")
            logger.debug(f"Skipped frame {frame_id}: {e}")
    return tag

def build_frames(tag: Any) -> List[id3.Frame]:
    """Return mutagen frame instances for the non-empty fields of a tag."""
    if not isinstance(tag, Mapping):
        raise InvalidArgument('tag argument must be a mapping')

    frames = []
    for spec in TAG_FIELDS:
        value = tag.get(spec.name)
        value = trim(str(value)) if value is not None else ''
        if not value:
            continue
        if spec.name == 'COMMENT':
            frames.append(id3.COMM(encoding=3, lang='eng', desc='', text=[value]))
        else:
            frame_cls = getattr(id3, FRAME_IDS[spec.name])
            frames.append(frame_cls(encoding=3, text=[value]))
    return frames
