"""Custom exceptions for the genome typed object."""

import time
from typing import Optional, Dict, Any, List
from pathlib import Path


class GenomeObjectError(Exception):
    """Base exception for genome object errors."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        self.operation = operation
        self.timestamp = time.time()
        super().__init__(message)


class ValidationError(GenomeObjectError):
    """Input data or document failed validation."""

    def __init__(self, message: str, errors: Optional[List[str]] = None,
                 operation: Optional[str] = None) -> None:
        self.errors = errors or []
        super().__init__(message, operation)


class LocationParseError(ValidationError):
    """A location string could not be parsed."""

    def __init__(self, location: str, reason: str = "unrecognised location format",
                 operation: Optional[str] = None) -> None:
        self.location = location
        super().__init__(f"Cannot parse location '{location}': {reason}", operation=operation)


class LookupFailure(GenomeObjectError, KeyError):
    """An identifier could not be resolved through the genome indexes."""

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return str(self.args[0]) if self.args else ""


class FeatureNotFoundError(LookupFailure):
    """Feature id is absent from the feature index."""

    def __init__(self, feature_id: str, operation: Optional[str] = None) -> None:
        self.feature_id = feature_id
        super().__init__(f"Feature not found: {feature_id}", operation)


class ContigNotFoundError(LookupFailure):
    """Contig id is absent from the contig index."""

    def __init__(self, contig_id: str, operation: Optional[str] = None) -> None:
        self.contig_id = contig_id
        super().__init__(f"Contig not found: {contig_id}", operation)


class ResourceError(GenomeObjectError):
    """An external resource (file, id service, uuid source) failed."""

    def __init__(self, message: str, resource_type: str,
                 operation: Optional[str] = None) -> None:
        self.resource_type = resource_type
        super().__init__(message, operation)

    def get_error_details(self) -> Dict[str, Any]:
        """Get structured error details for logging."""
        return {
            "message": str(self),
            "resource_type": self.resource_type,
            "operation": self.operation,
            "timestamp": self.timestamp
        }


class IdAllocationError(ResourceError):
    """The id allocator could not supply a new identifier."""

    def __init__(self, typed_prefix: str, message: Optional[str] = None,
                 operation: Optional[str] = None) -> None:
        self.typed_prefix = typed_prefix
        super().__init__(
            message or f"Could not get a new ID with typed-prefix \"{typed_prefix}\"",
            "id_allocator",
            operation
        )


class ExportError(ResourceError):
    """Writing part of a genome directory failed."""

    def __init__(self, path: Path, reason: str, operation: Optional[str] = None) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot create {path}: {reason}", "filesystem", operation)


class ConfigurationError(GenomeObjectError):
    """Configuration error."""

    def __init__(self, message: str, config_path: Optional[Path] = None,
                 operation: Optional[str] = None) -> None:
        self.config_path = config_path
        super().__init__(message, operation)
