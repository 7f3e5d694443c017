"""JSON output utilities for CLI commands with machine-parseable output."""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import click
from pydantic import BaseModel, ConfigDict, Field

from gitstack.cli.output import machine_output

format_option = click.option(
    "--format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (text or json)",
)


class ErrorResponse(BaseModel):
    """Pydantic model for error JSON responses.

    Attributes:
        error: Error message
        error_type: Error class name (e.g., "ConflictError")
        exit_code: Exit code for the process
        warnings: Warnings collected before the failure
    """

    model_config = ConfigDict(strict=True)

    error: str
    error_type: str
    exit_code: int = Field(default=1, ge=0, le=255)
    warnings: list[str] = Field(default_factory=list)


def _serialize_for_json(obj: Any) -> Any:
    """Recursively serialize special types for JSON.

    Handles Path, datetime, Enum and dataclass instances that appear in
    plain dict structures.
    """
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return _serialize_for_json(asdict(obj))
    if isinstance(obj, dict):
        return {key: _serialize_for_json(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize_for_json(item) for item in obj]
    return obj


def emit_json(data: dict[str, Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    For Pydantic models, call model.model_dump(mode='json') before
    passing to this function.
    """
    serialized = _serialize_for_json(data)
    machine_output(json.dumps(serialized, indent=2))


def emit_json_error(
    error: str, error_type: str, exit_code: int = 1, warnings: list[str] | None = None
) -> None:
    """Output error as JSON and exit.

    Raises:
        SystemExit: Always raises to terminate with specified exit code
    """
    error_response = ErrorResponse(
        error=error,
        error_type=error_type,
        exit_code=exit_code,
        warnings=warnings or [],
    )
    emit_json(error_response.model_dump(mode="json"))
    raise SystemExit(exit_code)
