"""
Exception types raised by the interview system.
"""


class RehearseError(Exception):
    """Base class for all interview system errors."""


class ConfigurationError(RehearseError, ValueError):
    """Interview configuration rejected before any turn is generated."""


class TextGenerationUnavailable(RehearseError, RuntimeError):
    """The text-generation collaborator failed, timed out, or returned nothing usable."""


class SynthesisFailed(RehearseError, RuntimeError):
    """Speech synthesis failed. Never fatal for a turn."""


class TranscriptionFailed(RehearseError, RuntimeError):
    """Speech-to-text failed for a candidate recording."""


class GradingParseError(RehearseError, ValueError):
    """The grading response could not be parsed into a Grade."""


class SessionStoreError(RehearseError, RuntimeError):
    """A session record could not be read or written."""
