"""Configuration management and validation."""

import copy
import yaml
import json
from pathlib import Path
from typing import Dict, Any, Union, Optional

from genometo.core.types import ValidationResult
from genometo.core.exceptions import ConfigurationError
from genometo.core.id_allocation import IdAllocator, SQLiteIdAllocator


ID_ALLOCATION_BACKENDS = ("genome", "sqlite")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIGURATION: Dict[str, Any] = {
    "annotation": {
        "default_annotator": "Nobody"
    },
    "id_allocation": {
        "backend": "genome",
        "database": None
    },
    "export": {
        "map_CDS_to_peg": False,
        "correct_fig_id": False,
        "assigned_functions_file": "assigned_functions"
    },
    "logging": {
        "level": "INFO",
        "file": None
    }
}


def create_default_configuration() -> Dict[str, Any]:
    """
    Create the default configuration.

    Returns:
        Default configuration dictionary
    """
    return copy.deepcopy(DEFAULT_CONFIGURATION)


def load_configuration(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load and validate configuration from file, merged over the defaults.

    Args:
        config_path: Path to configuration file (YAML or JSON)

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigurationError: Invalid configuration
        FileNotFoundError: Configuration file not found
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                config = yaml.safe_load(f)
            elif config_path.suffix.lower() == '.json':
                config = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported config file format: {config_path.suffix}",
                                         config_path=config_path)

    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Error parsing configuration file: {e}", config_path=config_path)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration file must contain a mapping",
                                 config_path=config_path)

    return merge_configurations(create_default_configuration(), config)


def validate_configuration_schema(config: Dict[str, Any]) -> ValidationResult:
    """
    Check the structure and values of a configuration.

    Args:
        config: Configuration dictionary

    Returns:
        ValidationResult with validation status
    """
    errors = []
    warnings = []

    for section in config:
        if section not in DEFAULT_CONFIGURATION:
            warnings.append(f"Unknown configuration section '{section}' ignored")

    for section in DEFAULT_CONFIGURATION:
        if section in config and not isinstance(config[section], dict):
            errors.append(f"'{section}' must be a dictionary")

    id_allocation = config.get("id_allocation")
    if isinstance(id_allocation, dict):
        backend = id_allocation.get("backend", "genome")
        if backend not in ID_ALLOCATION_BACKENDS:
            errors.append(f"Unknown id_allocation backend '{backend}'")
        elif backend == "sqlite" and not id_allocation.get("database"):
            errors.append("id_allocation backend 'sqlite' requires 'database'")

    export = config.get("export")
    if isinstance(export, dict):
        for flag in ("map_CDS_to_peg", "correct_fig_id"):
            if flag in export and not isinstance(export[flag], bool):
                errors.append(f"export.{flag} must be true or false")
        functions_file = export.get("assigned_functions_file")
        if functions_file is not None and (not isinstance(functions_file, str)
                                           or "/" in functions_file):
            errors.append("export.assigned_functions_file must be a plain file name")

    logging_config = config.get("logging")
    if isinstance(logging_config, dict):
        level = str(logging_config.get("level", "INFO")).upper()
        if level not in LOG_LEVELS:
            errors.append(f"Unknown logging level '{logging_config.get('level')}'")

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        details={"validation": "basic_checks_completed"}
    )


def merge_configurations(
    base_config: Dict[str, Any],
    override_config: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Merge configuration dictionaries with validation.

    Args:
        base_config: Base configuration
        override_config: Override parameters

    Returns:
        Merged configuration
    """
    def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    merged = merge_dicts(base_config, override_config)

    validation_result = validate_configuration_schema(merged)
    if not validation_result.is_valid:
        raise ConfigurationError(
            f"Configuration validation failed: {validation_result.errors}"
        )

    return merged


def save_configuration(config: Dict[str, Any], output_path: Union[str, Path]) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        output_path: Output file path

    Raises:
        ConfigurationError: Error saving configuration
    """
    output_path = Path(output_path)

    try:
        with open(output_path, 'w') as f:
            if output_path.suffix.lower() in ['.yaml', '.yml']:
                yaml.safe_dump(config, f, default_flow_style=False, indent=2, sort_keys=False)
            elif output_path.suffix.lower() == '.json':
                json.dump(config, f, indent=2)
            else:
                raise ConfigurationError(f"Unsupported output format: {output_path.suffix}",
                                         config_path=output_path)

    except (yaml.YAMLError, TypeError, OSError) as e:
        raise ConfigurationError(f"Error saving configuration: {e}", config_path=output_path)


def create_id_allocator(config: Dict[str, Any]) -> Optional[IdAllocator]:
    """
    Build the id allocator selected by the ``id_allocation`` section.

    Returns:
        An allocator, or None to let each genome number its own features
    """
    section = config.get("id_allocation") or {}
    backend = section.get("backend", "genome")
    if backend == "genome":
        return None
    if backend == "sqlite":
        database = section.get("database")
        if not database:
            raise ConfigurationError("id_allocation backend 'sqlite' requires 'database'")
        return SQLiteIdAllocator(database)
    raise ConfigurationError(f"Unknown id_allocation backend '{backend}'")
