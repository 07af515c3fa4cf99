from __future__ import annotations

from fastapi import APIRouter, Depends

from admission.core.config import settings
from admission.core.rate_limit import enforce_rate_limit
from admission.schemas.limits import BucketLimits, LimitsResponse

router = APIRouter(tags=["Limits"])


@router.get(
    "/limits",
    response_model=LimitsResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def get_limits() -> LimitsResponse:
    """Report the admission limits this process enforces.

    The route is itself rate limited, so callers can use it to observe the
    limiter in action.
    """

    limits = settings.limiter
    return LimitsResponse(
        enabled=settings.app.rate_limit_enabled,
        global_bucket=BucketLimits(
            capacity=limits.global_capacity,
            refill_rate=limits.global_refill_rate,
        ),
        identity_bucket=BucketLimits(
            capacity=limits.identity_capacity,
            refill_rate=limits.identity_refill_rate,
        ),
    )
