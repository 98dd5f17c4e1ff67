"""Exceptions raised across the package."""


class SalesInsightsError(Exception):
    """Base error for sales-insights."""


class LoaderError(SalesInsightsError):
    """Raw record collections could not be loaded. Fatal at startup."""


class EmptyDatasetError(SalesInsightsError):
    """No month could be derived from the data to anchor the analysis period."""


class UnknownEndpointError(SalesInsightsError, ValueError):
    """Query endpoint name is not registered."""
