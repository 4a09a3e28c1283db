"""
common/errors.py

Exception taxonomy of the engine. Only DecodeError crosses the analysis
boundary as a failure; everything past decoding is a total function.
"""


class AudioEngineError(Exception):
    """Base class for errors raised by this package."""


class DecodeError(AudioEngineError):
    """Input bytes could not be parsed into a SampleBuffer."""


class ConfigurationError(AudioEngineError):
    """Configuration files or overrides hold invalid values."""


class EmptyInputError(AudioEngineError):
    """
    Kept for callers that catch it by name. Never raised: an empty or
    silence-dominant buffer is valid input and yields Neutral at 0.5.
    """
