"""Error hierarchy for schedule transcoding and generation retry classification.

Codec failures are all permanent: a malformed schedule or annotated text will
not improve on retry. Only the generation client raises TransientError, which
tenacity retries automatically.

Example usage with tenacity:
    Retrying(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
"""


class TranscoderError(Exception):
    """Base exception for all transcoder errors."""

    pass


class TransientError(TranscoderError):
    """Temporary failure that may succeed on retry.

    Examples: connection errors, read timeouts, 5xx from the generation service.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429) - needs longer backoff."""

    pass


class PermanentError(TranscoderError):
    """Failure that won't succeed on retry."""

    pass


class InvalidDateComponent(PermanentError, ValueError):
    """A month index, day-of-month or year is outside its valid range."""

    pass


class EncodeError(PermanentError):
    """A schedule could not be rendered as annotated text."""

    pass


class EmptySchedule(EncodeError):
    """The schedule to encode has no days."""

    pass


class InvalidFirstDate(EncodeError):
    """The first day's date cannot be split into year, month and day."""

    pass


class MissingDays(EncodeError):
    """Strict encoding found a gap in the month the schedule covers."""

    pass


class DecodeError(PermanentError):
    """Annotated text could not be parsed back into a schedule.

    Carries the 1-based line number and raw line when known.
    """

    def __init__(self, message: str, *, line_number: int | None = None, line: str | None = None) -> None:
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class DateResolutionError(DecodeError):
    """A line's header does not resolve to a real calendar date."""

    pass


class MalformedLine(DecodeError):
    """A line has no ' - ' separator and is not an empty-day line."""

    pass


class RecoveryFailed(PermanentError):
    """A response that looked like JSON could not be turned into a schedule."""

    pass


class GenerationError(PermanentError):
    """The generation service rejected the request or returned an unusable body."""

    pass
