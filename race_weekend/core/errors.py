"""Exception types raised by the race weekend engine."""


class PreconditionError(ValueError):
    """An operation was invoked before its inputs were in place.

    Raised, for example, when a lap time is requested from a car that has
    no driver or no circuit attached.
    """


class AssignmentError(ValueError):
    """A car/driver link would leave either side half-linked or shared."""


class RaceStateError(RuntimeError):
    """A race lifecycle operation was called from the wrong state."""
