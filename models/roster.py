from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CoreRosterAssignment(BaseModel):
    """
    One (player, team, season) entry of the `core-roster-{seasonId}` document.

    A player without an `isCore` entry for a team is a non-core (reserve) member
    of that team for the season.
    """

    model_config = ConfigDict(extra="ignore")

    playerId: str = Field(...)
    teamName: str = Field(...)
    seasonId: Optional[str] = None
    isCore: bool = False
    playerName: Optional[str] = None
    seasonName: Optional[str] = None
    isCaptain: bool = False
    isViceCaptain: bool = False
    markedCoreDate: Optional[str] = None
    unmarkedCoreDate: Optional[str] = None
