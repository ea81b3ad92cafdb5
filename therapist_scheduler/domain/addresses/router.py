"""Address router - validation and geocoding endpoints"""

import logging

from fastapi import APIRouter, Depends

from ...auth import get_current_identity
from ...cache import Cache
from ...config import GEOCODING_RPM, SchedulerSettings, get_settings
from ...rate_limiter import create_rate_limiter
from ...shared.http import unwrap
from .resolver import AddressResolver
from .schemas import BatchResolveRequest, ResolveAddressRequest, ValidateAddressRequest
from .service import AddressService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/addresses", tags=["Addresses"], dependencies=[Depends(get_current_identity)]
)

rate_limit_geocoding = create_rate_limiter(
    limit=GEOCODING_RPM,
    window_seconds=60,
    key_prefix="geocode",
    use_ip=True,
)


def get_address_resolver(settings: SchedulerSettings = Depends(get_settings)) -> AddressResolver:
    """Dependency injection for AddressResolver"""
    return AddressResolver(settings, cache=Cache(prefix="geocode"))


def get_address_service(resolver: AddressResolver = Depends(get_address_resolver)) -> AddressService:
    return AddressService(resolver)


@router.post("/validate")
async def validate_address(
    data: ValidateAddressRequest, service: AddressService = Depends(get_address_service)
):
    """Check address structure without calling the geocoder"""
    return unwrap(service.validate_address(data.model_dump()))


@router.post("/resolve")
async def resolve_address(
    data: ResolveAddressRequest,
    service: AddressService = Depends(get_address_service),
    _: None = Depends(rate_limit_geocoding),
):
    """Geocode a single address"""
    return unwrap(await service.resolve_address(data.model_dump()))


@router.post("/batch-resolve")
async def batch_resolve_addresses(
    data: BatchResolveRequest,
    service: AddressService = Depends(get_address_service),
    _: None = Depends(rate_limit_geocoding),
):
    """Geocode several addresses sequentially"""
    return unwrap(await service.batch_resolve_addresses(data.model_dump()))
