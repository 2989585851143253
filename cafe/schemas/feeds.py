from typing import Literal

from pydantic import ConfigDict, StrictBool
from sqlmodel import SQLModel


class FeedMessage(SQLModel):
    """
    Client -> server message on a live feed socket.

      {"type": "visibility", "visible": false}
      {"type": "refresh"}

    `visible` must be a real JSON boolean; "false" as a string is rejected.
    """

    model_config = ConfigDict(extra="ignore")

    type: Literal["visibility", "refresh"]
    visible: StrictBool = True
