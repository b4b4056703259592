"""Load schema definitions from JSON or YAML files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import SchemaParseError
from .models import SchemaDefinition

logger = logging.getLogger(__name__)


def parse_schema(data: Any) -> SchemaDefinition:
    """Build a SchemaDefinition from already-decoded data.

    Raises:
        SchemaParseError: If the data does not describe a valid schema
    """
    if not isinstance(data, dict):
        raise SchemaParseError(
            "Invalid schema definition",
            [f"expected an object at the top level, got {type(data).__name__}"],
        )
    if "rules" not in data:
        raise SchemaParseError("Invalid schema definition", ["missing 'rules' key"])

    try:
        return SchemaDefinition.model_validate(data)
    except ValidationError as e:
        raise SchemaParseError("Invalid schema definition", _format_errors(e)) from e


def load_schema(path: Path | str) -> SchemaDefinition:
    """Load a schema definition file.

    ``.yaml``/``.yml`` files are read with PyYAML, everything else as JSON.

    Raises:
        SchemaParseError: If the file is missing, undecodable or invalid
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise SchemaParseError(f"Cannot read schema file {path}", [str(e)]) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaParseError(f"Cannot decode schema file {path}", [str(e)]) from e

    schema = parse_schema(data)
    logger.debug("Loaded %d field rules from %s", len(schema.rules), path)
    return schema


def _format_errors(error: ValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        problems.append(f"{location}: {message}" if location else message)
    return problems
