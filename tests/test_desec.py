import ipaddress
import json

import httpx
import pytest
import respx

from dnsupdater.providers.desec import DEFAULT_API_ENDPOINT, DesecProvider
from dnsupdater.records import (
    ARecord,
    DnsRecordType,
    MXRecord,
    SerializeError,
    TXTRecord,
    UnauthorizedError,
)

RRSETS = f"{DEFAULT_API_ENDPOINT}/domains/example.com/rrsets/"


def _rrset(subname, rr_type, records, ttl=3600):
    return {
        "created": "2024-01-01T00:00:00Z",
        "domain": "example.com",
        "subname": subname,
        "name": f"{subname}.example.com.",
        "records": records,
        "ttl": ttl,
        "type": rr_type,
        "touched": "2024-01-01T00:00:00Z",
    }


@pytest.fixture
def router():
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.mark.asyncio
async def test_create_a_record_posts_rrset(router):
    route = router.post(RRSETS).mock(
        return_value=httpx.Response(201, json=_rrset("www", "A", ["192.0.2.1"]))
    )
    provider = DesecProvider("token")
    result = await provider.create(
        "www.example.com", ARecord(ipaddress.IPv4Address("192.0.2.1")), 3600, "example.com"
    )
    assert result is None
    request = route.calls.last.request
    assert json.loads(request.content) == {
        "subname": "www",
        "type": "A",
        "ttl": 3600,
        "records": ["192.0.2.1"],
    }
    assert request.headers["Authorization"] == "Token token"


@pytest.mark.asyncio
async def test_create_at_apex_uses_at_sign(router):
    route = router.post(RRSETS).mock(
        return_value=httpx.Response(201, json=_rrset("@", "TXT", ['"hello"']))
    )
    result = await DesecProvider("token").create(
        "example.com.", TXTRecord("hello"), 300, "example.com."
    )
    assert result is None
    body = json.loads(route.calls.last.request.content)
    assert body["subname"] == "@"
    assert body["records"] == ['"hello"']


@pytest.mark.asyncio
async def test_update_mx_puts_fqdn_exchange(router):
    route = router.put(f"{RRSETS}mail/MX/").mock(
        return_value=httpx.Response(200, json=_rrset("mail", "MX", []))
    )
    result = await DesecProvider("token").update(
        "mail.example.com", MXRecord("mx.example.com", 10), 600, "example.com"
    )
    assert result is None
    body = json.loads(route.calls.last.request.content)
    assert body["records"] == ["10 mx.example.com."]
    assert body["type"] == "MX"
    assert body["ttl"] == 600


@pytest.mark.asyncio
async def test_delete_sends_delete_to_rrset(router):
    route = router.delete(f"{RRSETS}_domainkey/TXT/").mock(
        return_value=httpx.Response(204)
    )
    result = await DesecProvider("token").delete(
        "_domainkey.example.com", "example.com", DnsRecordType.TXT
    )
    assert result is None
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_custom_endpoint_is_used(router):
    endpoint = "https://desec.test/api/v1"
    route = router.delete(f"{endpoint}/domains/example.com/rrsets/www/A/").mock(
        return_value=httpx.Response(204)
    )
    result = await DesecProvider("token", endpoint=endpoint).delete(
        "www.example.com", "example.com", DnsRecordType.A
    )
    assert result is None
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_unauthorized_is_raised(router):
    router.post(RRSETS).mock(return_value=httpx.Response(401))
    with pytest.raises(UnauthorizedError):
        await DesecProvider("token").create(
            "www.example.com", TXTRecord("x"), 60, "example.com"
        )


@pytest.mark.asyncio
async def test_malformed_response_raises_serialize_error(router):
    router.post(RRSETS).mock(return_value=httpx.Response(201, json={"ok": True}))
    with pytest.raises(SerializeError):
        await DesecProvider("token").create(
            "www.example.com", TXTRecord("x"), 60, "example.com"
        )