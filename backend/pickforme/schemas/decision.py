from pydantic import BaseModel, Field

from pickforme.schemas.venue import ConversationContext, Location, UserPreferences, Venue


class DecisionFactor(BaseModel):
    name: str
    weight: float = Field(ge=0, le=1)
    score: float = Field(ge=0, le=1)
    description: str


class DecisionResponse(BaseModel):
    selected_venue: Venue
    alternatives: list[Venue] = []
    factors: list[DecisionFactor]
    reasoning: str
    confidence: float = Field(ge=0, le=1)


class DecisionRequest(BaseModel):
    venues: list[Venue]
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    location: Location | None = None
    context: ConversationContext | None = None
    force_selection: bool = False
