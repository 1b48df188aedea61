"""
Exceptions for the MockPrep practice engine
"""


class PracticeEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(PracticeEngineError):
    """Session configuration is invalid or yields no questions."""


class NotFoundError(PracticeEngineError):
    """Unknown session, question or evaluation id."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class InvalidStateError(PracticeEngineError):
    """Operation is not legal in the session's current state."""


class OutOfRangeError(PracticeEngineError):
    """No current question is left to answer."""


class OracleError(PracticeEngineError):
    """The text-generation oracle failed, timed out or returned garbage."""


class PersistenceError(PracticeEngineError):
    """A history write failed after retrying."""
