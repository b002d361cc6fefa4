import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultEnum(str, Enum):
    WIN = 'win'
    LOSS = 'loss'
    TIE = 'tie'
    ABANDONED = 'abandoned'
    FORFEIT = 'forfeit'


class Fixture(BaseModel):
    """Entry of the `fixtures-{seasonId}` document"""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(...)
    seasonId: Optional[str] = None
    gameNumber: Optional[str] = None
    date: dt.date = Field(..., description='format: yyyy-mm-dd')
    time: Optional[str] = None
    team: str = Field(...)
    opponent: Optional[str] = None
    venue: Optional[str] = None
    division: Optional[str] = None
    isHomeTeam: bool = False
    result: Optional[ResultEnum] = None
    playerOfMatch: Optional[str] = None
    paidUmpireFee: bool = False
    umpireFeePaidBy: Optional[str] = None
    umpireFeeAmount: Optional[float] = None

    @field_validator('date', mode='before')
    @classmethod
    def strip_time_part(cls, v: Any) -> Any:
        # stored dates sometimes carry a time component; only the calendar day counts
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    @field_validator('result', mode='before')
    @classmethod
    def empty_result_to_none(cls, v: Any) -> Any:
        return v or None

    def is_past(self, now: dt.datetime) -> bool:
        """A fixture is past once local midnight of its date lies before `now`"""
        return dt.datetime.combine(self.date, dt.time.min) < now
