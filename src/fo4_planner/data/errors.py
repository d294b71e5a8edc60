"""Exceptions raised while loading the bundled perk dataset.

Any of these at startup is fatal: the planner cannot run without a
well-formed catalog.
"""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when the dataset file is missing or is not valid JSON."""


class DataValidationError(DataError):
    """Raised when dataset content fails structural validation."""
