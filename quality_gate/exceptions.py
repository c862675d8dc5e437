"""
Quality Gate Exceptions

Errors raised by the readers and loaders. None of these ever reach the
host: the engine converts infrastructure failures into an allow decision.
"""


class QualityGateError(Exception):
    """Base exception for quality gate errors"""
    pass


class TranscriptReadError(QualityGateError):
    """Transcript file is missing or cannot be read"""
    pass


class TicketParseError(QualityGateError):
    """A single ticket document could not be parsed"""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class ConfigurationError(QualityGateError):
    """Configuration file is invalid"""
    pass
