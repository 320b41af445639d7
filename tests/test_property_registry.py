import httpx
import pytest

from allocation.connectors.property_registry import PropertyRegistryClient
from allocation.core.config import Settings
from allocation.core.errors import DirectoryError


def _client(handler) -> PropertyRegistryClient:
    settings = Settings(property_registry_url="http://registry.test")
    return PropertyRegistryClient.from_settings(settings, transport=httpx.MockTransport(handler))


async def test_get_contact_parses_camel_case():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/contacts/P000001"
        return httpx.Response(200, json={
            "content": {
                "contactCode": "P000001",
                "name": "Kalle Anka",
                "nationalRegistrationNumber": "19800101-0001",
                "isTenant": True,
            }
        })

    client = _client(handler)
    try:
        contact = await client.get_contact("P000001")
    finally:
        await client.aclose()

    assert contact.contact_code == "P000001"
    assert contact.is_tenant is True


async def test_get_leases_requests_upcoming_leases():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/contacts/P000001/leases"
        assert request.url.params["includeUpcomingLeases"] == "true"
        return httpx.Response(200, json=[
            {
                "leaseId": "216-704-00-0022/02",
                "rentalPropertyId": "216-704-00-0022",
                "type": "Bostadskontrakt               ",
                "leaseStartDate": "2023-03-01T00:00:00Z",
                "lastDebitDate": None,
            }
        ])

    client = _client(handler)
    try:
        leases = await client.get_leases("P000001")
    finally:
        await client.aclose()

    assert len(leases) == 1
    assert leases[0].is_housing_contract()
    assert leases[0].rental_property_id == "216-704-00-0022"


async def test_lookups_resolve_estate_code_and_area():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/rental-objects/705-025-03-0001/estate-code":
            return httpx.Response(200, json={"estateCode": "24104", "type": "babps"})
        if request.url.path == "/rental-properties/216-704-00-0022/residential-area":
            return httpx.Response(200, json={"code": "OXB", "caption": "Oxbacken"})
        return httpx.Response(404, json={"reason": "not found"})

    client = _client(handler)
    try:
        estate = await client.resolve_estate_code("705-025-03-0001")
        area = await client.resolve_residential_area("216-704-00-0022")
        missing = await client.resolve_estate_code("nope")
    finally:
        await client.aclose()

    assert estate.estate_code == "24104"
    assert estate.type == "babps"
    assert area.code == "OXB"
    assert missing is None


async def test_server_error_raises_directory_error():
    client = _client(lambda request: httpx.Response(503, text="maintenance"))
    try:
        with pytest.raises(DirectoryError) as exc:
            await client.get_waiting_lists("19800101-0001")
    finally:
        await client.aclose()

    assert exc.value.operation == "get-waiting-lists"
    assert exc.value.detail == "HTTP_503"


async def test_timeout_raises_directory_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = _client(handler)
    try:
        with pytest.raises(DirectoryError) as exc:
            await client.get_contact("P000001")
    finally:
        await client.aclose()

    assert exc.value.detail == "TIMEOUT"


async def test_non_json_body_raises_directory_error():
    client = _client(lambda request: httpx.Response(200, text="<html>login</html>"))
    try:
        with pytest.raises(DirectoryError) as exc:
            await client.get_contact("P000001")
    finally:
        await client.aclose()

    assert exc.value.operation == "get-contact"
    assert exc.value.detail == "INVALID_JSON"


async def test_unexpected_payload_raises_directory_error():
    client = _client(lambda request: httpx.Response(200, json={"content": {"name": "no contact code"}}))
    try:
        with pytest.raises(DirectoryError) as exc:
            await client.get_contact("P000001")
    finally:
        await client.aclose()

    assert exc.value.operation == "get-contact"
    assert exc.value.detail == "INVALID_PAYLOAD"
