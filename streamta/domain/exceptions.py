"""
Domain exceptions for the streamta signal engine.

Implements a hierarchy distinguishing between recoverable runtime errors
(a rejected bar, an indicator that is still warming up, a degenerate window)
and fatal errors (bad constructor arguments, broken configuration) that
indicate a programming or deployment problem.
"""

from __future__ import annotations

from typing import Optional


class StreamTAError(Exception):
    """Base class for all streamta domain exceptions."""
    pass


class RecoverableError(StreamTAError):
    """
    Errors the caller can recover from without rebuilding anything.

    Examples:
    - A bar with high < low or a NaN close
    - A query issued before enough bars have arrived
    - A normalisation window whose reference average is zero
    """
    pass


class FatalError(StreamTAError):
    """
    Errors that require a code or configuration change.

    Examples:
    - A period below one
    - Overbought threshold not above oversold
    - Unreadable configuration files
    """
    pass


class InvalidInputError(RecoverableError, ValueError):
    """A bar or sample was rejected before any state was mutated."""
    pass


class NotReadyError(RecoverableError):
    """Not enough samples are buffered for the requested computation."""
    pass


class InsufficientDataError(NotReadyError):
    """Divergence needs at least three closes and two indicator values."""
    pass


class DivisionByZeroError(RecoverableError, ZeroDivisionError):
    """A normalisation reference (historical average, weighted volume) is zero."""
    pass


class ProviderError(RecoverableError):
    """
    A signal provider rejected a bar during a batched engine update.

    The engine has already rolled every provider back when this is raised.
    """

    def __init__(self, provider: str, cause: Optional[BaseException] = None) -> None:
        self.provider = provider
        self.cause = cause
        message = f"provider {provider!r} rejected bar"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidParamsError(FatalError, ValueError):
    """Bad constructor or setter arguments."""
    pass


class ConfigurationError(FatalError):
    """Invalid configuration files or values."""
    pass
