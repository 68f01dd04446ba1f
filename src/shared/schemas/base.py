from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base Pydantic schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready camelCase payload. Unset optional fields (None) are left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ErrorDetail(BaseSchema):
    """Error shown next to a view operation; field names the offending input, if any."""

    field: str | None = None
    message: str
