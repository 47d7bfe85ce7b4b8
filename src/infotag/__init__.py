"""infotag - ID3v1 tags from filenames and filenames from ID3v1 tags."""

__version__ = "0.40.0"

from .core import (
    TAG_FIELDS,
    IGNORE,
    FieldSpec,
    get_field_table,
    get_field_names,
    create_empty,
    render
)
from .errors import (
    InfoTagError,
    InvalidArgument,
    ValidationError,
    PatternError,
    MatchError,
    AmbiguityError,
    MissingValueError,
    ConfigError
)
from .utils import Config, trim, convert_case
from .processor import (
    Result,
    set_field,
    parse_into_record,
    render_from_record,
    tag_from_frames,
    tag_to_frames,
    flush_warnings,
    get_last_error
)
from .batch import process_batch, render_batch

__all__ = [
    "TAG_FIELDS",
    "IGNORE",
    "FieldSpec",
    "get_field_table",
    "get_field_names",
    "create_empty",
    "render",
    "InfoTagError",
    "InvalidArgument",
    "ValidationError",
    "PatternError",
    "MatchError",
    "AmbiguityError",
    "MissingValueError",
    "ConfigError",
    "Config",
    "trim",
    "convert_case",
    "Result",
    "set_field",
    "parse_into_record",
    "render_from_record",
    "tag_from_frames",
    "tag_to_frames",
    "flush_warnings",
    "get_last_error",
    "process_batch",
    "render_batch"
]
