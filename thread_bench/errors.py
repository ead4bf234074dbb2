"""This module contains the error types and the exit code each one maps to."""


class BenchError(Exception):
    """
    Base class for every fatal condition of a benchmark session.
    None of these are retried: each one aborts the whole sequence.
    """

    exit_code = 1


class ConfigurationError(BenchError, ValueError):
    """An invalid parameter, rejected before any side effect."""

    exit_code = 2


class ResourceNotFoundError(BenchError):
    """A file the session needs is missing or unusable."""


class ExecutableNotFoundError(ResourceNotFoundError):
    exit_code = 3


class PreferencesNotFoundError(ResourceNotFoundError):
    exit_code = 4


class ScoreParseError(BenchError):
    """The benchmark output did not contain a score."""

    exit_code = 5


class PreferencesIOError(BenchError, OSError):
    """Reading or writing the preferences file failed."""

    exit_code = 6


class PreferencesFormatError(PreferencesIOError):
    """The preferences file is too short to hold the fields we patch."""


class RunCancelled(BenchError):
    exit_code = 130
