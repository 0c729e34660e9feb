"""
Exception types raised by the pipeline stages.
"""


class GoalsRegressionError(Exception):
    """Base class for pipeline errors."""


class DataQualityError(GoalsRegressionError):
    """Input records are missing columns or violate a record invariant."""


class FitError(GoalsRegressionError):
    """A model could not be fit (e.g. collinear or constant features)."""


class ConfigurationError(FitError):
    """Fitting parameters are unusable (empty penalty grid, bad fold count...)."""


class AcquisitionError(GoalsRegressionError):
    """The input file is neither cached locally nor downloadable."""
