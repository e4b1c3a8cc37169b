# hazardscan/schemas/user.py
from pydantic import UUID4, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from hazardscan.core.constants import UserStatus
from hazardscan.schemas.analysis import CamelModel


class User(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID4
    external_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    inspection_count: int
    monthly_inspection_count: int
    last_reset_date: Optional[datetime] = None
    status: UserStatus
    created_at: datetime
    updated_at: datetime


class QuotaSnapshot(CamelModel):
    limit: int
    used: int
    remaining: int
    resets_at: datetime


class UserMe(CamelModel):
    ok: bool = True
    user: User
    role: Optional[str] = None
    quota: QuotaSnapshot


class UserList(CamelModel):
    ok: bool = True
    users: List[User]


class UserAdminUpdate(CamelModel):
    """Partial admin edit; at least one field is required"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    status: Optional[UserStatus] = None
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    monthly_inspection_count: Optional[int] = Field(default=None, ge=0)
    last_reset_date: Optional[datetime] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        return self
