class BetlangError(Exception):
    """Base class for betlang runtime errors."""


class InvalidArgument(BetlangError, ValueError):
    """Raised when an operation receives parameters outside its domain."""


class EmptyInput(InvalidArgument):
    """Raised when a statistic is requested over an empty sequence."""


class LengthMismatch(InvalidArgument):
    """Raised when paired sequences differ in length or are empty."""


class ZeroExpectedFrequency(InvalidArgument, ZeroDivisionError):
    """Raised when a chi-square expected count is zero."""


class ZeroWeightSum(InvalidArgument, ZeroDivisionError):
    """Raised when weighted selection has a total weight that is not positive."""


class InvalidMarkovChain(InvalidArgument):
    """Raised when a transition table is not a valid stochastic table."""


class InvalidSeed(BetlangError, TypeError):
    """Raised when a seed is not a non-negative integer."""
