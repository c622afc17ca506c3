"""Assembly of named time series, point records and model bindings from a
declarative configuration document."""

__version__ = "0.1.0"
