"""Failure taxonomy for sorting runs."""


class LassortError(Exception):
    """Base class for lassort failures."""


class UsageError(LassortError, ValueError):
    """Invalid run configuration, detected before any I/O."""


class RuntimeFailure(LassortError, RuntimeError):
    """A run failed after it started; the run is aborted."""


class EstimationError(RuntimeFailure):
    """Cell size could not be estimated from the input header."""
