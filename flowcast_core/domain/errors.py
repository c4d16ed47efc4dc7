"""Exceptions raised by the forecasting core."""


class FlowcastError(Exception):
    """Base exception for flowcast_core"""


class ValidationError(FlowcastError, ValueError):
    """Caller-supplied parameters are out of range or malformed"""


class DataQualityError(FlowcastError, ValueError):
    """A single transaction record cannot be interpreted"""
