import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from postlab.rules.models import Rules

# First ```yaml block of a markdown document
_YAML_FENCE = re.compile(r"^[ \t]*```ya?ml[^\n]*\n(.*?)^[ \t]*```", re.DOTALL | re.MULTILINE)


def extract_yaml(content: str) -> str:
    """Rules may live in a markdown file; take the first yaml block if there is one."""
    match = _YAML_FENCE.search(content)
    return match.group(1) if match else content


def parse_rules(content: str) -> Rules:
    """Parse and validate rules text. Raises ValueError."""
    try:
        data: Any = yaml.safe_load(extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Rules validation failed: top level must be a mapping")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.

    Raises FileNotFoundError if the file is missing, ValueError if the YAML or
    the schema is invalid.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Rules file not found at: {path}")
    return parse_rules(path.read_text())
