from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class SchemaConstraint:
    """JSON-schema constraint handed verbatim to the model."""

    name: str
    json_schema: Mapping[str, Any]
    strict: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("SchemaConstraint.name must be non-empty")
        if not self.json_schema:
            raise ValueError("SchemaConstraint.json_schema must be non-empty")

    def to_response_format(self) -> dict[str, Any]:
        """OpenAI-style ``response_format`` payload understood by litellm."""
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.name,
                "schema": self.json_schema,
                "strict": self.strict,
            },
        }
