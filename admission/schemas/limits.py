from __future__ import annotations

from pydantic import BaseModel, Field


class BucketLimits(BaseModel):
    capacity: int = Field(..., description="Maximum burst admitted by the bucket", ge=1)
    refill_rate: int = Field(..., description="Tokens added per second", ge=1)


class LimitsResponse(BaseModel):
    """Active admission limits for this process."""

    enabled: bool = Field(..., description="Whether admission control is enforced")
    global_bucket: BucketLimits = Field(..., description="Bucket shared by all callers")
    identity_bucket: BucketLimits = Field(
        ..., description="Bucket applied to each API key or client IP"
    )
