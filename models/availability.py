from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PlayerAvailabilityRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    playerId: str = Field(...)
    playerName: str = Field(default="")
    wasAvailable: bool = False
    wasSelected: bool = False
    duties: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def selected_implies_available(self):
        if self.wasSelected:
            self.wasAvailable = True
        return self

    @property
    def has_response(self) -> bool:
        return self.wasAvailable or self.wasSelected


class FixtureAvailability(BaseModel):
    """The `availability-{fixtureId}` document"""

    model_config = ConfigDict(extra="ignore")

    fixtureId: str = Field(...)
    seasonId: Optional[str] = None
    playerAvailability: List[PlayerAvailabilityRecord] = Field(default_factory=list)

    def record_for(self, player_id: str) -> Optional[PlayerAvailabilityRecord]:
        return next((r for r in self.playerAvailability if r.playerId == player_id), None)


class AvailabilityIndexEntry(BaseModel):
    """Entry of the `availability-index-{seasonId}` document"""

    model_config = ConfigDict(extra="ignore")

    fixtureId: str = Field(...)
