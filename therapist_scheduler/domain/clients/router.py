"""Client router - FastAPI endpoints for client records"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_identity
from ...database import get_db
from ...shared.http import unwrap
from ..addresses.resolver import AddressResolver
from ..addresses.router import get_address_resolver, rate_limit_geocoding
from .schemas import ClientCreate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"], dependencies=[Depends(get_current_identity)])


def get_client_service(
    db: Session = Depends(get_db), resolver: AddressResolver = Depends(get_address_resolver)
) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db, resolver)


@router.get("")
async def list_clients(service: ClientService = Depends(get_client_service)):
    return unwrap(service.list_clients())


@router.post("")
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
    _: None = Depends(rate_limit_geocoding),
):
    """Create a client; the home address is geocoded first"""
    return unwrap(await service.create_client(data.model_dump()))


@router.delete("/{client_id}")
async def delete_client(client_id: int, service: ClientService = Depends(get_client_service)):
    """Delete a client along with its assignments"""
    return unwrap(service.delete_client(client_id))
