"""Exception hierarchy for event validation.

Every exception carries a stable ``code`` used to report why an event was skipped
or which part of it was dropped. None of these escape ``expand()``; the validator
converts them into a ``ValidationOutcome``.
"""


class EventValidationError(Exception):
    """Base exception for malformed event descriptors."""

    code = "InvalidEvent"


class MissingRequiredFieldError(EventValidationError):
    """One of id, title, world or category is missing or blank.

    The event is skipped entirely.
    """

    code = "MissingRequiredField"


class NonPositiveDurationError(EventValidationError):
    """startAt/endAt are missing, or endAt is not after startAt.

    The event is skipped entirely.
    """

    code = "NonPositiveDuration"


class InvalidTimezoneError(EventValidationError):
    """The timezone name does not resolve to an IANA zone.

    The event is skipped entirely.
    """

    code = "InvalidTimezone"


class InvalidTimeFormatError(EventValidationError):
    """A time-of-day string is not 24-hour HH:MM.

    Only the offending slot is dropped, unless no slot can be produced at all.
    """

    code = "InvalidTimeFormat"


class InvalidWeekdayCodeError(EventValidationError):
    """A weekday code is not one of SU, MO, TU, WE, TH, FR, SA.

    Only the offending code is dropped.
    """

    code = "InvalidWeekdayCode"


class UnsupportedRecurrenceError(EventValidationError):
    """The recurrence frequency is not NONE, DAILY or WEEKLY.

    The event yields no occurrences.
    """

    code = "UnsupportedRecurrence"
