from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel


class StaffLogin(SQLModel):
    model_config = ConfigDict(extra="forbid")

    username: str
    password: str


class StaffToken(SQLModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
