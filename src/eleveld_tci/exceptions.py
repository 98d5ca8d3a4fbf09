"""
Exceptions raised by the dosing plan computation.

Hierarchy::

    EleveldError
    ├── InvalidCovariateError (also a ValueError)
    └── ConvergenceError      (also a RuntimeError)
"""
# Standard import
from typing import Optional


class EleveldError(Exception):
    """Base exception of the package."""


class InvalidCovariateError(EleveldError, ValueError):
    """
    Raised when a patient covariate or a plan option fails the precondition check.

    Parameters
    ----------
    covariate : str
        Name of the offending field.
    value : object
        Value received.
    reason : str
        What the value should have been.

    """

    def __init__(self, covariate: str, value, reason: str):
        self.covariate = covariate
        self.value = value
        super().__init__(f"Invalid covariate '{covariate}' = {value!r}: {reason}")


class ConvergenceError(EleveldError, RuntimeError):
    """
    Raised when the simulation cannot be guaranteed to terminate or did not terminate in time.

    Parameters
    ----------
    message : str
        Description of the condition.
    phase : str, optional
        Phase of the plan when the condition was detected.
    elapsed : float, optional
        Simulated time when the condition was detected (s).

    """

    def __init__(self, message: str, phase: Optional[str] = None, elapsed: Optional[float] = None):
        self.phase = phase
        self.elapsed = elapsed
        if phase is not None and elapsed is not None:
            message = f"{message} (phase: {phase}, t = {elapsed:.0f} s)"
        super().__init__(message)
