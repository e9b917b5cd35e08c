"""
Centralized metadata header handling using the python-frontmatter library.

Agent and skill templates are markdown files with a YAML header. This module
parses that header into a typed ``Metadata`` record (known fields are
validated, unknown keys are kept as opaque strings) and renders headers back
for deployment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import frontmatter
import yaml

logger = logging.getLogger(__name__)

VALID_AGENT_MODELS = {"inherit", "sonnet", "opus", "haiku"}

# Header keys with a defined meaning; everything else is passed through
SCALAR_FIELDS = ("name", "description", "model", "category")
LIST_FIELDS = ("tags", "allowed-tools", "suggested-for")
KNOWN_FIELDS = SCALAR_FIELDS + LIST_FIELDS + ("tools",)


class MetadataError(ValueError):
    """Raised when a known header field has the wrong shape."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass
class Metadata:
    """Typed view of a template's metadata header."""

    name: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    tools: str | list[str] | None = None
    model: Optional[str] = None
    category: Optional[str] = None
    allowed_tools: list[str] = field(default_factory=list)
    suggested_for: list[str] = field(default_factory=list)
    extra: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Metadata":
        """Build metadata from a parsed header, raising MetadataError on bad fields."""
        errors = validate(raw)
        if errors:
            raise MetadataError(errors)

        extra = {
            str(key): _opaque(value)
            for key, value in raw.items()
            if key not in KNOWN_FIELDS
        }
        return cls(
            name=_scalar(raw.get("name")),
            description=_scalar(raw.get("description")),
            tags=_as_list(raw.get("tags")),
            tools=_tools(raw.get("tools")),
            model=_scalar(raw.get("model")),
            category=_scalar(raw.get("category")),
            allowed_tools=_as_list(raw.get("allowed-tools")),
            suggested_for=_as_list(raw.get("suggested-for")),
            extra=extra,
        )


def parse(content: str) -> tuple[dict, str]:
    """
    Parse YAML frontmatter from markdown content.

    Args:
        content: Full file content (markdown with optional frontmatter)

    Returns:
        Tuple of (frontmatter dict, body content)
    """
    try:
        post = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError, TypeError) as e:
        logger.debug("Unparseable frontmatter, treating as plain body: %s", e)
        return {}, content
    if not isinstance(post.metadata, dict):
        return {}, content
    return dict(post.metadata), post.content


def parse_file(file_path: Path) -> tuple[dict, str]:
    """Parse YAML frontmatter from a markdown file."""
    return parse(file_path.read_text(encoding="utf-8"))


def parse_metadata(content: str) -> tuple[Metadata, str]:
    """Parse content into a typed Metadata record and the body."""
    raw, body = parse(content)
    return Metadata.from_dict(raw), body


def validate(raw: dict[str, Any]) -> list[str]:
    """
    Check the shape of the known header fields.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    for key in SCALAR_FIELDS:
        value = raw.get(key)
        if value is not None and isinstance(value, (dict, list)):
            errors.append(f"'{key}' must be a string")

    for key in LIST_FIELDS:
        value = raw.get(key)
        if value is None or isinstance(value, str):
            continue
        if not isinstance(value, list) or any(isinstance(v, (dict, list)) for v in value):
            errors.append(f"'{key}' must be a list of strings")

    tools = raw.get("tools")
    if tools is not None and not isinstance(tools, (str, list)):
        errors.append("'tools' must be '*', a comma separated string or a list")

    return errors


def validate_agent(raw: dict[str, Any]) -> list[str]:
    """Validate an agent header: shape checks plus required fields and model."""
    errors = validate(raw)
    if not raw.get("description"):
        errors.append("Missing required field: 'description'")
    model = raw.get("model")
    if isinstance(model, str) and model not in VALID_AGENT_MODELS:
        errors.append(
            f"Invalid model '{model}'. Must be one of: {', '.join(sorted(VALID_AGENT_MODELS))}"
        )
    return errors


def render(metadata: dict[str, Any], body: str) -> str:
    """Render a metadata header followed by the body text."""
    if not metadata:
        return body
    header = yaml.safe_dump(
        metadata, default_flow_style=False, sort_keys=False, allow_unicode=True
    ).rstrip()
    return f"---\n{header}\n---\n\n{body}"


def _scalar(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_list(value: Any) -> list[str]:
    """Accept both YAML lists and the legacy '[a, b]' / 'a, b' string forms."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    text = str(value).strip()
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return [item.strip() for item in text.split(",") if item.strip()]


def _tools(value: Any) -> str | list[str] | None:
    if value is None:
        return None
    if isinstance(value, str) and value.strip() == "*":
        return "*"
    return _as_list(value)


def _opaque(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return yaml.safe_dump(value, default_flow_style=True, sort_keys=False).strip()
