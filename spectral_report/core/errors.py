"""
Error kinds raised by the analysis pipeline.

Severity is encoded in the type, not in the message:
- InvalidInput: the waveform itself is unusable, nothing can be computed
- InvalidRange: one derived result set was requested with bad edges
- ExportFailed: one output table could not be written

InvalidInput and InvalidRange are also ValueErrors, so callers that only
know the builtin hierarchy still catch them.
"""

from pathlib import Path
from typing import Optional


class AnalysisError(Exception):
    """
    Base class for all pipeline errors.

    Attributes:
        result_set: Name of the result set the error belongs to
            (e.g. "peaks", "energy_distribution"), None if global
    """

    def __init__(self, message: str, result_set: Optional[str] = None):
        super().__init__(message)
        self.result_set = result_set

    def __str__(self) -> str:
        message = super().__str__()
        if self.result_set:
            return f"[{self.result_set}] {message}"
        return message


class InvalidInput(AnalysisError, ValueError):
    """Empty or ill-formed waveform, or non-positive sample rate."""


class InvalidRange(AnalysisError, ValueError):
    """Malformed band edges or boundary sequence."""


class ExportFailed(AnalysisError):
    """
    A table could not be written.

    The destination is guaranteed to be unchanged when this is raised.
    """

    def __init__(
        self,
        message: str,
        destination: Path,
        result_set: Optional[str] = None,
    ):
        super().__init__(message, result_set=result_set)
        self.destination = Path(destination)
