# hazardscan/schemas/setting.py
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from hazardscan.schemas.analysis import CamelModel


class Setting(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    key: str
    value: str
    description: Optional[str] = None
    updated_at: datetime


class SettingUpdate(CamelModel):
    value: str = Field(min_length=1)
    description: Optional[str] = None


class SettingList(CamelModel):
    ok: bool = True
    settings: List[Setting]
