class SchedulingError(ValueError):
    """Base class for every error raised by the scheduling core."""


class MalformedTimeError(SchedulingError):
    pass


class InvalidTimeBlockError(SchedulingError):
    pass


class InvalidDurationError(SchedulingError):
    pass


class UnsatisfiableRecurrenceError(SchedulingError):
    pass


class RecurrenceLimitError(SchedulingError):
    pass


class InvalidTransitionError(SchedulingError):
    pass
