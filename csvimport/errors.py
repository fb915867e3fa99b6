"""Exception types raised while reading import inputs."""

from pathlib import Path
from typing import Optional, Union


class CSVImportError(Exception):
    """Base class for import failures other than missing files."""


class MalformedDocumentError(CSVImportError, ValueError):
    """A schema or mapping document could not be parsed."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ValidationError(CSVImportError, ValueError):
    """Inputs parsed but do not satisfy a required constraint."""


class SchemaValidationError(ValidationError):
    """A schema row is missing a required attribute."""


class MappingValidationError(ValidationError):
    """The mapping document lacks the table name or has an invalid column entry."""
