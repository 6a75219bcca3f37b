from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workflow_telemetry.constants import BACKGROUND_STEP_SUFFIX
from workflow_telemetry.utils import as_utc


class Step(BaseModel):
    """A single executed step of a workflow job, as reported by the platform."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    number: int = Field(..., description="1-based execution order within the job")
    name: str = Field(..., description="Human-readable step label")
    status: Optional[str] = Field(None, description="queued, in_progress, completed")
    conclusion: Optional[str] = Field(
        None, description="success, failure, skipped, cancelled; unset while running"
    )
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator("started_at", "completed_at")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    def is_background(self) -> bool:
        """Whether the step was launched detached, e.g. `Build (background)`."""
        return self.name.strip().lower().endswith(BACKGROUND_STEP_SUFFIX)


class Job(BaseModel):
    """A workflow job snapshot with its ordered step list."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    name: str
    head_sha: str = ""
    status: Optional[str] = None
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    runner_name: Optional[str] = None
    steps: List[Step] = Field(default_factory=list)

    @field_validator("started_at", "completed_at")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @field_validator("steps", mode="before")
    @classmethod
    def default_steps(cls, v):
        return [] if v is None else v
