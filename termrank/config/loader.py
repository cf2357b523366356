"""YAML loader for the ranking configuration."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from termrank.config.schemas import RankingConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into location/type/message records."""
    return [
        {
            "loc": ".".join(str(part) for part in err["loc"]) or "<root>",
            "type": err["type"],
            "msg": err["msg"],
        }
        for err in exc.errors()
    ]


def load_ranking_config(path: Path | None = None) -> RankingConfig:
    """Load and validate a ranking configuration file.

    Args:
        path: Path to ranking.yaml. None returns the built-in defaults.

    Returns:
        Validated, immutable RankingConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If YAML parsing or validation fails.
    """
    if path is None:
        return RankingConfig()

    content_bytes = path.read_bytes()
    checksum = hashlib.sha256(content_bytes).hexdigest()
    log = logger.bind(component="config", file_path=str(path), checksum=checksum)

    try:
        parsed = yaml.safe_load(content_bytes.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        log.error("config_yaml_parse_failed", error=str(e))
        raise ConfigValidationError(
            [{"loc": "<root>", "type": "yaml_parse_error", "msg": str(e)}],
            str(path),
        ) from e

    try:
        config = RankingConfig.model_validate(parsed)
    except ValidationError as e:
        errors = _format_errors(e)
        log.error("config_validation_failed", error_count=len(errors))
        raise ConfigValidationError(errors, str(path)) from e

    log.info("config_loaded", version=config.version)
    return config
