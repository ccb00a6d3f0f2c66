"""
Name: Integration Routes

Responsibilities:
  - Serve the shipment feed to machine callers holding an active API key
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..container import get_shipment_feed
from ..domain.repositories import ShipmentFeed
from ..identity.access import IntegrationPrincipal, require_api_key
from ..platform.error_responses import OPENAPI_ERROR_RESPONSES

router = APIRouter(
    prefix="/integration", tags=["Integration"], responses=OPENAPI_ERROR_RESPONSES
)


class IntegrationShipmentResponse(BaseModel):
    id: int
    reference: str
    status: str
    customer: Optional[str]
    vehicle: Optional[str]
    distance_km: float
    weight_kg: float
    price: Decimal
    created_utc: Optional[datetime]


class IntegrationShipmentsResponse(BaseModel):
    integration_key_name: str
    count: int
    data: list[IntegrationShipmentResponse]


@router.get("/shipments", response_model=IntegrationShipmentsResponse)
def list_shipments_for_integration(
    caller: IntegrationPrincipal = Depends(require_api_key()),
    feed: ShipmentFeed = Depends(get_shipment_feed),
):
    shipments = feed.list_for_integration()
    return IntegrationShipmentsResponse(
        integration_key_name=caller.key_name,
        count=len(shipments),
        data=[
            IntegrationShipmentResponse(
                id=s.id,
                reference=s.reference,
                status=s.status,
                customer=s.customer,
                vehicle=s.vehicle,
                distance_km=s.distance_km,
                weight_kg=s.weight_kg,
                price=s.price,
                created_utc=s.created_utc,
            )
            for s in shipments
        ],
    )
