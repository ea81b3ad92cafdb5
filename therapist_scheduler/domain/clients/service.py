"""Client service - Business logic for client records"""

import logging

from sqlalchemy.orm import Session

from ...models import Client
from ...shared.errors import RecordNotFound
from ...shared.params import operation, parse_params
from ..addresses.resolver import AddressResolver
from .repository import ClientRepository
from .schemas import ClientCreate

logger = logging.getLogger(__name__)


def serialize_client(client: Client) -> dict:
    return {
        "id": client.id,
        "name": client.name,
        "address": client.address,
        "lat": client.latitude,
        "lng": client.longitude,
        "supervisor": client.supervisor,
    }


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session, resolver: AddressResolver):
        self.db = db
        self.resolver = resolver
        self.repo = ClientRepository()

    @operation
    def list_clients(self) -> dict:
        return {"success": True, "clients": [serialize_client(c) for c in self.repo.get_clients(self.db)]}

    @operation
    async def create_client(self, params: dict) -> dict:
        data = parse_params(ClientCreate, params)
        resolved = await self.resolver.resolve(data.address, data.postalCode)

        client = self.repo.create_client(
            self.db,
            name=data.name,
            address=resolved.formatted_address,
            latitude=resolved.latitude,
            longitude=resolved.longitude,
            supervisor=data.supervisor,
        )
        logger.info(f"✅ Created client {client.id} ({client.name})")
        return {
            "success": True,
            "client": serialize_client(client),
            "confidence": resolved.confidence,
            "regionWarning": resolved.region_warning,
        }

    @operation
    def delete_client(self, client_id: int) -> dict:
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise RecordNotFound(f"Client {client_id} not found")

        removed = self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Deleted client {client_id} and {removed} assignment(s)")
        return {"success": True, "deletedAssignments": removed}
