from pydantic import BaseModel, Field, field_validator


def parse_price_tier(value):
    """Accept 1-4 or "$".."$$$$"; anything blank means unknown."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped and set(stripped) == {"$"}:
            return len(stripped)
        if stripped.isdigit():
            return int(stripped)
        raise ValueError(f"Unrecognised price tier: {value!r}")
    return value


class VenueCategory(BaseModel):
    alias: str
    title: str

    model_config = {"frozen": True}


class Coordinates(BaseModel):
    latitude: float
    longitude: float

    model_config = {"frozen": True}


class Venue(BaseModel):
    """Read-only snapshot of a business as returned by the venue provider."""

    id: str = Field(min_length=1)
    name: str
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    price: int | None = Field(default=None, ge=1, le=4)
    categories: list[VenueCategory] = []
    distance: float | None = Field(default=None, ge=0)   # miles from requester
    coordinates: Coordinates | None = None
    address: str | None = None
    transactions: list[str] = []
    phone: str = ""
    display_phone: str = ""
    url: str = ""
    is_closed: bool = False

    model_config = {"frozen": True}

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return parse_price_tier(v)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, v):
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            return v
        return [
            {"alias": c.strip().lower().replace(" ", ""), "title": c.strip()} if isinstance(c, str) else c
            for c in v
        ]

    @property
    def price_label(self) -> str:
        return "$" * self.price if self.price else "unknown"

    @property
    def contact_phone(self) -> str:
        return self.display_phone or self.phone

    def supports(self, transaction: str) -> bool:
        return transaction in self.transactions


class Location(BaseModel):
    latitude: float
    longitude: float
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str | None = None
    country: str | None = None


class UserPreferences(BaseModel):
    price_range: int = Field(default=2, ge=1, le=4)
    cuisine_types: list[str] = []
    dietary_restrictions: list[str] = []
    atmosphere: str | None = None
    party_size: int = Field(default=2, ge=1)

    @field_validator("price_range", mode="before")
    @classmethod
    def parse_price_range(cls, v):
        parsed = parse_price_tier(v)
        return 2 if parsed is None else parsed


class ConversationContext(BaseModel):
    last_user_query: str = ""
    stage: str | None = None
