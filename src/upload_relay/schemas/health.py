from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Response schema for GET /health."""
    status: Literal["ok"] = "ok"
