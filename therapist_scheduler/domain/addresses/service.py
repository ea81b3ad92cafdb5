"""Address operations exposed to the application layer"""

import logging

from ...shared.params import operation, parse_params
from .resolver import AddressResolver
from .schemas import BatchResolveRequest, ResolveAddressRequest, ValidateAddressRequest

logger = logging.getLogger(__name__)


class AddressService:
    def __init__(self, resolver: AddressResolver):
        self.resolver = resolver

    @operation
    def validate_address(self, params: dict) -> dict:
        data = parse_params(ValidateAddressRequest, params)
        is_valid, reason = self.resolver.normalizer.validate_format(data.address)
        result = {
            "success": True,
            "valid": is_valid,
            "normalized": self.resolver.normalizer.normalize(data.address),
        }
        if reason:
            result["reason"] = reason
        return result

    @operation
    async def resolve_address(self, params: dict) -> dict:
        data = parse_params(ResolveAddressRequest, params)
        result = await self.resolver.resolve(data.address, data.postalCode)
        return {"success": True, **result.to_dict()}

    @operation
    async def batch_resolve_addresses(self, params: dict) -> dict:
        data = parse_params(BatchResolveRequest, params)
        entries = [
            entry if isinstance(entry, str) else entry.model_dump() for entry in data.addresses
        ]
        results = await self.resolver.batch_resolve(entries)
        resolved = sum(1 for r in results if r["success"])
        response = {
            "success": resolved > 0,
            "resolved": resolved,
            "failed": len(results) - resolved,
            "results": results,
        }
        if not resolved:
            response["error"] = "No addresses could be resolved"
        return response
