"""
Error types raised by the clinic finder.

  ClinicFinderError
      ├── InvalidInput            bad query point, empty catalog, bad K/unit
      ├── MalformedCatalogRecord  one catalog line that cannot be parsed
      └── CatalogUnavailable      the catalog file cannot be read at all
"""


class ClinicFinderError(Exception):
    """Base class for all clinic finder errors."""


class InvalidInput(ClinicFinderError, ValueError):
    """Caller-supplied input the ranker cannot work with."""


class MalformedCatalogRecord(ClinicFinderError, ValueError):
    """A single catalog record with missing fields or bad coordinates."""

    def __init__(self, message: str, line_number: int | None = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class CatalogUnavailable(ClinicFinderError, RuntimeError):
    """The catalog source could not be read or held no usable records."""
