from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator


class Item(BaseModel):
    model_config = ConfigDict(extra="forbid")

    variant_id: str = Field(min_length=1)
    quantity: StrictInt = Field(ge=1)


class StorePostCartReq(BaseModel):
    model_config = ConfigDict(extra="forbid")

    region_id: Optional[str] = None
    sales_channel_id: Optional[str] = None
    country_code: Optional[str] = Field(None, min_length=2, max_length=2)
    items: Optional[List[Item]] = None
    context: Optional[Dict[str, Any]] = None


class AdminPostBatchesReq(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: str = Field(min_length=1)
    context: Dict[str, Any]
    dry_run: StrictBool = False


class AdminPostShippingProfilesReq(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    type: Literal["default", "gift_card", "custom"]


class AdminPostShippingProfilesProfileReq(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # may be omitted, but never cleared
    name: Optional[str] = Field(None, min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("name cannot be null")
        return v
