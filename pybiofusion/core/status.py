"""
Return codes and status objects for pybiofusion.

Every public fuser operation reports its outcome as a ReturnStatus. Inside
the package, failures are raised as FusionError subclasses (one per return
code) and converted to a ReturnStatus at the interface boundary by the
``returns_status`` decorator.
"""

import functools
import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class ReturnCode(Enum):
    """Return codes for the fuser interfaces."""

    Success = 0
    ConfigError = 1
    ParseError = 2
    TemplateCreationError = 3
    VerifTemplateError = 4
    NumDataError = 5
    TemplateFormatError = 6
    InputLocationError = 7
    MemoryError = 8
    NotImplemented = 9
    NonCongruentVectors = 10
    VendorError = 11

    @property
    def description(self) -> str:
        """Human-readable description of the code."""
        return _DESCRIPTIONS[self]

    def __str__(self) -> str:
        return self.description


_DESCRIPTIONS = {
    ReturnCode.Success: "Success",
    ReturnCode.ConfigError: "Error reading configuration files",
    ReturnCode.ParseError: "Cannot parse the input data",
    ReturnCode.TemplateCreationError: "Elective refusal to produce a template",
    ReturnCode.VerifTemplateError: (
        "Either/both input templates were result of failed feature extraction"
    ),
    ReturnCode.NumDataError: "Number of input data not supported",
    ReturnCode.TemplateFormatError: "Template is an incorrect format or defective",
    ReturnCode.InputLocationError: (
        "Cannot locate the input data - the input files or names seem incorrect"
    ),
    ReturnCode.MemoryError: "Memory allocation failed (e.g. out of memory)",
    ReturnCode.NotImplemented: "Function is not implemented",
    ReturnCode.NonCongruentVectors: (
        "Vectors of different lengths passed to function expecting same lengths"
    ),
    ReturnCode.VendorError: "Vendor-defined error",
}

# Codes that mean a scheme could not be loaded when raised by initialize.
FATAL_CODES = frozenset({
    ReturnCode.ConfigError,
    ReturnCode.ParseError,
    ReturnCode.TemplateFormatError,
})


class ReturnStatus:
    """
    Outcome of a fuser operation.

    Parameters
    ----------
    code : ReturnCode
        Return status code
    info : str, optional
        Optional information string for debugging
    fatal : bool, optional
        True when the failure left the instance without a usable scheme.
        Set by ``initialize``; per-call input errors are never fatal.

    Examples
    --------
    >>> status = ReturnStatus(ReturnCode.Success)
    >>> status.ok
    True
    >>> ReturnStatus(ReturnCode.NumDataError, "expected 2 scores, got 3")
    ReturnStatus(NumDataError, 'expected 2 scores, got 3')
    """

    __slots__ = ("code", "info", "fatal")

    def __init__(self, code: ReturnCode, info: str = "", fatal: bool = False):
        if not isinstance(code, ReturnCode):
            raise TypeError(f"code must be a ReturnCode, got {type(code)}")
        self.code = code
        self.info = info
        self.fatal = fatal

    @property
    def ok(self) -> bool:
        """True when the code is Success."""
        return self.code is ReturnCode.Success

    @property
    def is_fatal(self) -> bool:
        """True when initialization failed to load a scheme."""
        return self.fatal

    def __bool__(self) -> bool:
        return self.ok

    def __eq__(self, other) -> bool:
        if not isinstance(other, ReturnStatus):
            return NotImplemented
        return self.code == other.code and self.info == other.info

    def __hash__(self) -> int:
        return hash((self.code, self.info))

    def __repr__(self) -> str:
        if self.info:
            return f"ReturnStatus({self.code.name}, {self.info!r})"
        return f"ReturnStatus({self.code.name})"

    def __str__(self) -> str:
        if self.info:
            return f"{self.code.description}: {self.info}"
        return self.code.description


class FusionError(Exception):
    """Base class for errors that map onto a ReturnCode."""

    code = ReturnCode.VendorError

    def to_status(self) -> ReturnStatus:
        return ReturnStatus(self.code, str(self))


class ConfigError(FusionError):
    code = ReturnCode.ConfigError


class ParseError(FusionError):
    code = ReturnCode.ParseError


class TemplateCreationError(FusionError):
    code = ReturnCode.TemplateCreationError


class VerifTemplateError(FusionError):
    code = ReturnCode.VerifTemplateError


class NumDataError(FusionError):
    code = ReturnCode.NumDataError


class TemplateFormatError(FusionError):
    code = ReturnCode.TemplateFormatError


class InputLocationError(FusionError):
    code = ReturnCode.InputLocationError


class NonCongruentVectors(FusionError):
    code = ReturnCode.NonCongruentVectors


class NotImplementedFusionError(FusionError):
    code = ReturnCode.NotImplemented


class VendorError(FusionError):
    code = ReturnCode.VendorError


def returns_status(with_output: bool = True, loads_scheme: bool = False) -> Callable:
    """
    Convert any exception raised by a fuser operation into a ReturnStatus.

    FusionError subclasses keep their code, MemoryError maps to the
    MemoryError code and anything else becomes VendorError.

    Parameters
    ----------
    with_output : bool, optional
        If True (default) the wrapped function returns its output value and
        the wrapper returns ``(status, output)``; on failure output is None.
        If False the wrapper returns the status alone.
    loads_scheme : bool, optional
        Mark the wrapped function as an initializer: a failure with one of
        FATAL_CODES yields a fatal status
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except FusionError as exc:
                logger.debug("%s failed: %s", func.__name__, exc)
                status = exc.to_status()
            except MemoryError as exc:
                logger.error("%s ran out of memory", func.__name__)
                status = ReturnStatus(ReturnCode.MemoryError, str(exc))
            except Exception as exc:
                logger.exception("Unexpected error in %s", func.__name__)
                status = ReturnStatus(
                    ReturnCode.VendorError, f"{type(exc).__name__}: {exc}"
                )
            else:
                status = ReturnStatus(ReturnCode.Success)
                return (status, result) if with_output else status

            status.fatal = loads_scheme and status.code in FATAL_CODES
            return (status, None) if with_output else status
        return wrapper
    return decorator
