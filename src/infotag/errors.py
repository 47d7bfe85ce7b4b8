"""Exception hierarchy for infotag.

The strict functions in ``core``, ``operations`` and ``utils`` raise these.
The public functions in ``processor`` turn them into failed ``Result`` objects.
"""


class InfoTagError(Exception):
    """Base exception for infotag errors."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidArgument(InfoTagError):
    """Raised when a call is malformed: missing tag, string or field arguments."""
    pass


class ValidationError(InfoTagError):
    """Raised when a field value fails the schema constraints."""
    pass


class PatternError(InfoTagError):
    """Raised for malformed patterns: unknown or adjacent placeholders, empty spans."""
    pass


class MatchError(InfoTagError):
    """Raised when a separator of the pattern does not occur in the input."""
    pass


class AmbiguityError(InfoTagError):
    """Raised when a used separator re-occurs inside the final catch-all value."""
    pass


class MissingValueError(InfoTagError):
    """Raised when a tag lacks values required by a rendering pattern."""
    pass


class ConfigError(InfoTagError):
    """Raised for an invalid weed expression or case mode where strict checking applies."""
    pass
