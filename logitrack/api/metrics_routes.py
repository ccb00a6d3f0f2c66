"""
Name: Metrics Routes

Responsibilities:
  - Serve the request metrics snapshot and the Prometheus exposition

Constraints:
  - Admin role only
  - Read-only: never mutates the aggregate
"""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from ..identity.access import require_admin
from ..platform.error_responses import OPENAPI_ERROR_RESPONSES

router = APIRouter(
    prefix="/metrics",
    tags=["Metrics"],
    responses=OPENAPI_ERROR_RESPONSES,
    dependencies=[Depends(require_admin())],
)


class EndpointCountResponse(BaseModel):
    endpoint: str
    count: int


class MetricsResponse(BaseModel):
    total_requests: int
    average_response_time_ms: float
    per_endpoint: list[EndpointCountResponse]


@router.get("", response_model=MetricsResponse)
def get_metrics(request: Request):
    snapshot = request.app.state.request_metrics.snapshot()
    return MetricsResponse(**snapshot.to_dict())


@router.get("/prometheus")
def get_prometheus_metrics(request: Request):
    body, content_type = request.app.state.prometheus_metrics.render()
    return Response(content=body, media_type=content_type)
