"""Exception taxonomy shared by the job, store, and analysis layers."""


class AnalyzerError(Exception):
    """Base class for every error raised by the analyzer."""


class InvalidRequestError(AnalyzerError, ValueError):
    """Caller input was rejected before any work was scheduled."""


class OutOfRangeError(AnalyzerError, ValueError):
    """A score fell outside the 0-100 interval."""


class InvalidTransitionError(AnalyzerError):
    """A job was asked to leave a terminal state."""


class StoreError(AnalyzerError):
    """Base class for job store failures."""


class StoreUnavailableError(StoreError):
    """The storage backend could not be reached or written."""


class CorruptRecordError(StoreError):
    """A stored job record could not be decoded."""


class PayloadValidationError(AnalyzerError, ValueError):
    """An LLM response did not match the five-section contract."""


class AnalysisFailedError(AnalyzerError):
    """The analysis engine exhausted its retry budget."""


class TextExtractionError(AnalyzerError):
    """No usable text could be extracted from the resume document."""


class JobNotFoundError(AnalyzerError, LookupError):
    """No live job exists for the requested id."""
