"""Request-level failures raised by aggregation paths.

Per-source upstream failures are values (UpstreamFailure), not exceptions;
only failures that sink a whole request are raised.
"""


class AggregationError(RuntimeError):
    """Base exception for a request that produced no usable data."""


class DirectoryUnavailable(AggregationError):
    """The league directory could not be obtained or was empty."""


class SingleDayUnavailable(AggregationError):
    """The direct upstream call for a single day failed."""
