from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TeamDefinition(BaseModel):
    model_config = ConfigDict(extra="ignore")

    teamName: str = Field(...)
    division: Optional[str] = None
    captain: Optional[str] = None
    viceCaptain: Optional[str] = None


class Season(BaseModel):
    """Entry of the `seasons-list` document"""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(...)
    name: str = Field(default="")
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    isActive: bool = False
    teams: List[TeamDefinition] = Field(default_factory=list)

    @property
    def team_names(self) -> list[str]:
        return [team.teamName for team in self.teams]
