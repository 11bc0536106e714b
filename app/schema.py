from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class CheckAuthRequest(BaseModel):
    """Body of POST /checkauth."""

    model_config = ConfigDict(extra="ignore")

    id: StrictInt
    groupname: str


class CheckAuthResponse(BaseModel):
    """Verdict as sent on the wire: {"txok": ..., "message": ..., "data": {...}}."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(..., alias="txok")
    message: str = ""
    data: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def positive(cls, message: str = "OK") -> "CheckAuthResponse":
        return cls(ok=True, message=message)

    @classmethod
    def negative(cls, message: str) -> "CheckAuthResponse":
        return cls(ok=False, message=message)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
