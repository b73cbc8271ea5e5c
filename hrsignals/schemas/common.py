"""Shared schema base and field types."""

from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _normalize_uuid(value: str) -> str:
    return str(UUID(value))


# Database ids travel as canonical UUID strings
UUIDStr = Annotated[str, AfterValidator(_normalize_uuid)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
