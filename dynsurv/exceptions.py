"""Exception types raised by the dynamic metric evaluation procedure."""


class DynsurvError(Exception):
    """Base class for all errors raised by dynsurv."""


class InputDomainError(DynsurvError, ValueError):
    """Malformed input: negative times, unknown status, bad shapes."""


class UnusableObservationError(DynsurvError, ValueError):
    """A censoring weight was requested for an unusable observation."""


class SaturatedCensoringError(DynsurvError, ArithmeticError):
    """The censoring curve reached zero before the requested weight time."""
