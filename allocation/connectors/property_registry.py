from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from allocation.canonical.contracts import Contact, EstateInfo, Lease, ResidentialArea, WaitingList
from allocation.core.errors import DirectoryError
from allocation.services.http_client import ServiceHttpClient

log = logging.getLogger(__name__)


ModelT = TypeVar("ModelT", bound=BaseModel)


def _payload(data: Any) -> Any:
    # responses may carry a "data" or "content" envelope
    if isinstance(data, dict):
        if "data" in data:
            return data["data"]
        if "content" in data:
            return data["content"]
    return data


def _parse(operation: str, model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.warning("property registry %s returned an unexpected payload: %s", operation, e)
        raise DirectoryError(operation, "INVALID_PAYLOAD") from e


class PropertyRegistryClient:
    """
    Property registry over its JSON HTTP API.

    Endpoints (relative to PROPERTY_REGISTRY_URL):
      GET /contacts/{contactCode}
      GET /contacts/{nationalRegistrationNumber}/waiting-lists
      GET /contacts/{contactCode}/leases?includeUpcomingLeases=true
      GET /rental-objects/{rentalObjectCode}/estate-code
      GET /rental-properties/{rentalPropertyId}/residential-area
    """

    def __init__(self, http: ServiceHttpClient):
        self._http = http

    @classmethod
    def from_settings(cls, settings, *, transport: httpx.AsyncBaseTransport | None = None) -> "PropertyRegistryClient":
        return cls(ServiceHttpClient(
            base_url=settings.property_registry_url,
            timeout_seconds=settings.property_registry_timeout_seconds,
            transport=transport,
        ))

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, operation: str, url: str, params: dict[str, str] | None = None) -> Any | None:
        res = await self._http.get_json(url, params=params)
        if res.status_code == 404:
            return None
        if not res.ok:
            log.warning(
                "property registry %s failed: %s (status=%s, retryable=%s)",
                operation, res.error_code, res.status_code, res.retryable,
            )
            raise DirectoryError(operation, res.error_code)
        return _payload(res.data)

    async def get_contact(self, contact_code: str) -> Contact | None:
        data = await self._get("get-contact", f"/contacts/{quote(contact_code)}")
        return _parse("get-contact", Contact, data) if data else None

    async def get_waiting_lists(self, national_registration_number: str) -> list[WaitingList]:
        data = await self._get("get-waiting-lists", f"/contacts/{quote(national_registration_number)}/waiting-lists")
        return [_parse("get-waiting-lists", WaitingList, w) for w in data or []]

    async def get_leases(self, contact_code: str) -> list[Lease]:
        data = await self._get(
            "get-leases",
            f"/contacts/{quote(contact_code)}/leases",
            params={"includeUpcomingLeases": "true"},
        )
        return [_parse("get-leases", Lease, lease) for lease in data or []]

    async def resolve_estate_code(self, rental_object_code: str) -> EstateInfo | None:
        data = await self._get("get-estate-code", f"/rental-objects/{quote(rental_object_code)}/estate-code")
        return _parse("get-estate-code", EstateInfo, data) if data else None

    async def resolve_residential_area(self, rental_property_id: str) -> ResidentialArea | None:
        data = await self._get(
            "get-residential-area", f"/rental-properties/{quote(rental_property_id)}/residential-area"
        )
        return _parse("get-residential-area", ResidentialArea, data) if data else None
