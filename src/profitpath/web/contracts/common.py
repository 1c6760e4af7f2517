"""Shared base for request and response contracts.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base contract: camelCase aliases, population by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_text(value: Any) -> Any:
    """Accept JSON numbers for identifier and amount fields."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value
