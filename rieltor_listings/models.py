from __future__ import annotations

import json
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Currency(str, Enum):
    UAH = "Uah"
    USD = "Usd"
    EUR = "Eur"


class SubwayLine(str, Enum):
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"


class _Record(BaseModel):
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)


class Price(_Record):
    price_number: int = Field(default=0, ge=0)
    currency: Currency = Currency.UAH


class Address(_Record):
    street: str = ""
    house_number: str = ""  # may be "13/8", "2А"
    city: str = ""
    district: str = ""


class Commission(_Record):
    """Either a percentage rate or a fixed fee, never both."""

    commission_rate: int = Field(default=0, ge=0)
    commission_price: Optional[Price] = None

    @model_validator(mode="after")
    def _rate_xor_fee(self) -> "Commission":
        if self.commission_rate and self.commission_price is not None:
            raise ValueError("commission is either a rate or a fixed fee")
        return self

    @classmethod
    def rate(cls, percent: int) -> "Commission":
        return cls(commission_rate=percent)

    @classmethod
    def fee(cls, price: Price) -> "Commission":
        return cls(commission_price=price)


class Permits(_Record):
    premium_advert: bool = False
    short_period: bool = False
    commission: Commission = Field(default_factory=Commission)
    allow_children: bool = False
    allow_pets: bool = False
    bargain: bool = False


class SubwayStation(_Record):
    name: str
    line: SubwayLine


class Infrastructure(_Record):
    subway_station: List[SubwayStation] = Field(default_factory=list)
    landmarks: List[str] = Field(default_factory=list)
    residential_complex: Optional[str] = None


class Area(_Record):
    total: float = Field(default=0.0, ge=0)
    living: float = Field(default=0.0, ge=0)
    kitchen: float = Field(default=0.0, ge=0)


class Views(_Record):
    total: int = Field(default=0, ge=0)
    today: int = Field(default=0, ge=0)
    yesterday: int = Field(default=0, ge=0)


class AdvertStatistics(_Record):
    # relative phrases as shown on the site ("вчора", "1 тиж. тому")
    renewed: str = ""
    published: str = ""
    views: Views = Field(default_factory=Views)


class Characteristics(_Record):
    room_count: int = Field(default=1, ge=0)
    area: Area = Field(default_factory=Area)
    floor: int = Field(default=1, ge=0)
    max_floor: int = Field(default=1, ge=0)
    house_type: Optional[str] = None
    room_planning: Optional[str] = None
    state: Optional[str] = None
    statistics: AdvertStatistics = Field(default_factory=AdvertStatistics)


class Description(_Record):
    advert_description: str = ""
    details_description: str = ""


class Rieltor(_Record):
    rieltor_name: str = ""
    rieltor_phone_number: str = ""
    rieltor_position: str = ""
    rieltor_agency: Optional[str] = None


class Apartment(_Record):
    id: str = Field(default="", alias="_id")
    link: str = ""
    price: Price = Field(default_factory=Price)
    address: Address = Field(default_factory=Address)
    characteristics: Characteristics = Field(default_factory=Characteristics)
    description: Description = Field(default_factory=Description)
    permits: Permits = Field(default_factory=Permits)
    infrastructure: Infrastructure = Field(default_factory=Infrastructure)
    rieltor: Rieltor = Field(default_factory=Rieltor)
    photo: List[str] = Field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)
