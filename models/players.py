from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Player(BaseModel):
    """Club member as stored in the `players-all` document"""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(...)
    firstName: str = Field(default="")
    lastName: str = Field(default="")
    email: Optional[str] = None
    role: Optional[str] = None
    isActive: bool = True

    @property
    def fullName(self) -> str:
        return f"{self.firstName} {self.lastName}"
