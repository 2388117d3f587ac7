"""Strict schema baselines: unknown fields are rejected instead of ignored."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Response DTO base that can be built straight from ORM rows."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)


class StrictRequestModel(BaseModel):
    """Request DTO base; a typo in a field name is a 422, not a silent no-op."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)
