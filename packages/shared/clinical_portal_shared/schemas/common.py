from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"
    DOCTOR = "doctor"


class ClientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class SettingType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class CamelModel(BaseModel):
    """Request body accepting camelCase keys (as the dashboard sends them) or snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def provided(self) -> dict[str, Any]:
        """Fields the client actually sent, by attribute name."""
        return self.model_dump(exclude_unset=True)


class Envelope(BaseModel):
    """``{"success": true, ...}`` wrapper; payload keys are camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True


class MessageResponse(Envelope):
    message: str


class Record(BaseModel):
    """A stored row as the API returns it. Columns not declared on a subclass pass through."""
    model_config = ConfigDict(extra="allow")

    id: UUID
