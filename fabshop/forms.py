"""Validated shape of a contract submission: customer fields plus one block per room."""

from __future__ import annotations

import re
import uuid
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

PHONE_RE = re.compile(r"^\d{3}-\d{3}-\d{4}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Extras = dict[str, Union[dict[str, Any], float]]


def default_extras() -> Extras:
    return {
        "edge_price": 0,
        "tear_out_price": 0,
        "stove_price": 0,
        "waterfall_price": 0,
        "corbels_price": 0,
        "seam_price": 0,
    }


class SlabOption(BaseModel):
    """A slab picked for a room. is_full=False keeps the rest of it in stock."""

    id: int
    is_full: bool = True


class FixtureOption(BaseModel):
    """A sink or faucet type picked for a room (`id` accepted for `type_id`)."""

    type_id: int = Field(validation_alias=AliasChoices("type_id", "id"))


class RoomForm(BaseModel):
    room: str = "kitchen"
    room_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    sink_type: list[FixtureOption] = Field(default_factory=list)
    faucet_type: list[FixtureOption] = Field(default_factory=list)
    edge: str = "Flat"
    backsplash: str = "No"
    square_feet: float = 0
    retail_price: float = 0
    total_price: Optional[float] = None
    tear_out: str = "No"
    stove: str = "F/S"
    waterfall: str = "No"
    corbels: int = 0
    seam: str = "Standard"
    ten_year_sealer: bool = False
    slabs: list[SlabOption] = Field(default_factory=list)
    extras: Extras = Field(default_factory=default_extras)

    @model_validator(mode="after")
    def fixtures_need_a_slab(self):
        if (self.sink_type or self.faucet_type) and not self.slabs:
            raise ValueError("A room with sinks or faucets needs at least one slab")
        return self


class CustomerForm(BaseModel):
    """Customer + rooms submitted from the contract form."""

    name: str = Field(min_length=1)
    customer_id: Optional[int] = None
    seller_id: Optional[int] = None
    billing_address: str = ""
    billing_zip_code: Optional[str] = None
    project_address: Optional[str] = None
    same_address: bool = True
    phone: Optional[str] = None
    email: Optional[str] = None
    notes_to_sale: Optional[str] = None
    price: float = 0
    builder: bool = False
    company_name: Optional[str] = None
    rooms: list[RoomForm] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v and not PHONE_RE.match(v):
            raise ValueError("Required format: 317-316-1456")
        return v or None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v and not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email")
        return v or None

    @field_validator("notes_to_sale", mode="before")
    @classmethod
    def coerce_notes(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @property
    def total_square_feet(self) -> float:
        return sum(r.square_feet or 0 for r in self.rooms)
