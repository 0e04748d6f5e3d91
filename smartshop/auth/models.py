"""Session shape exposed to pages."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """Signed-in user as seen by pages."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None


class Session(BaseModel):
    """Current session."""

    model_config = ConfigDict(extra="allow")

    user: Optional[SessionUser] = None
    expires: Optional[str] = None
