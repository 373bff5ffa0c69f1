"""Contract errors raised by the engine.

Missing optional data is never an error (it degrades confidence).  These
exceptions cover inputs the engine cannot interpret at all.
"""


class EstimationContextError(ValueError):
    """The estimation context carries no usable activity classification."""


class TrainingSeriesError(ValueError):
    """A daily TSS series is out of order, duplicated, or not finite."""
