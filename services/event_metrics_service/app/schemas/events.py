from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..event_types import EventType, OperationType, ResourceType


class _HostEvent(BaseModel):
    # Keycloak serializes events in camelCase; snake_case is accepted as well.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class UserEvent(_HostEvent):
    # Kinds this service does not know yet stay plain strings
    type: EventType | str = Field(..., union_mode="left_to_right")
    realm_id: str = Field(..., min_length=1)
    client_id: str | None = None
    user_id: str | None = None
    session_id: str | None = None
    ip_address: str | None = None
    error: str | None = None
    details: dict[str, str] | None = None


class AdminEvent(_HostEvent):
    operation_type: OperationType | str = Field(..., union_mode="left_to_right")
    resource_type: ResourceType | str = Field(..., union_mode="left_to_right")
    realm_id: str = Field(..., min_length=1)
    resource_path: str | None = None


class EventAccepted(BaseModel):
    status: Literal["accepted"] = "accepted"
