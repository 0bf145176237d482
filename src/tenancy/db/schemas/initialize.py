"""Pydantic schemas for system initialization state."""

from datetime import datetime

from pydantic import BaseModel, Field


class StepStatus(BaseModel):
    component: str
    status: str
    error: str | None = None


class InitState(BaseModel):
    """Persisted outcome of the last initialization run."""

    is_initialized: bool = False
    statuses: list[StepStatus] = Field(default_factory=list)
    last_run_time: datetime | None = None
    version: str | None = None


class InitializeRequest(BaseModel):
    allow_reinitialization: bool | None = None
