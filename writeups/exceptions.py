"""Errors raised by the write-up pipelines."""


class WriteupError(Exception):
    """Base class for pipeline failures."""


class DataSourceError(WriteupError):
    """A remote or local input could not be read."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load {source}: {reason}")


class SchemaError(WriteupError):
    """A required column is missing after normalisation."""


class InsufficientDataError(WriteupError):
    """Too few observations for a statistical test or model fit."""
