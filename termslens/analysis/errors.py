from __future__ import annotations


class AnalysisError(Exception):
    """Base exception for all document analysis errors."""


class InputError(AnalysisError):
    """The caller supplied an unusable document."""


class EmptyInputError(InputError):
    """Document text is empty or whitespace only."""


class TransportError(AnalysisError):
    """The generation endpoint could not be reached or answered with an error."""


class ThrottledError(TransportError):
    """The generation endpoint signalled too many requests."""


class ExtractionError(AnalysisError):
    """No JSON object could be recovered from the model reply."""


class ResponseValidationError(AnalysisError):
    """A JSON object was recovered but lacks required fields or values."""


class NoValidRisksError(ResponseValidationError):
    """Every risk item in the reply was rejected."""
