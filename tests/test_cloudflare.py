import json

import httpx
import pytest
import respx

from dnsupdater.providers.cloudflare import CloudflareProvider
from dnsupdater.records import (
    ApiError,
    ARecord,
    CAARecord,
    CaaKind,
    DnsRecordType,
    MXRecord,
    SerializeError,
    SRVRecord,
    TlsaCertUsage,
    TlsaMatching,
    TlsaSelector,
    TLSARecord,
    TXTRecord,
)

API = "https://api.cloudflare.com/client/v4"
ZONES_URL = f"{API}/zones"
RECORDS_URL = f"{API}/zones/zone1/dns_records"


def ok(result):
    return httpx.Response(200, json={"errors": [], "success": True, "result": result})


def zone_list():
    return ok([{"id": "zone1", "name": "example.com"}])


@pytest.mark.asyncio
async def test_create_a_record_with_bearer_token():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        zones = router.get(ZONES_URL).mock(return_value=zone_list())
        post = router.post(RECORDS_URL).mock(return_value=ok({}))
        result = await provider.create(
            "www.example.com", ARecord("192.0.2.1"), 300, "example.com"
        )
    assert result is None
    assert zones.calls.last.request.url.params["name"] == "example.com"
    request = post.calls.last.request
    assert request.headers["Authorization"] == "Bearer token"
    assert json.loads(request.content) == {
        "ttl": 300,
        "proxied": False,
        "name": "www.example.com",
        "type": "A",
        "content": "192.0.2.1",
    }


@pytest.mark.asyncio
async def test_email_authentication_headers():
    provider = CloudflareProvider(secret="secret", email="admin@example.com")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=zone_list())
        post = router.post(RECORDS_URL).mock(return_value=ok({}))
        result = await provider.create("example.com", TXTRecord("hello"), 60, "example.com")
    assert result is None
    headers = post.calls.last.request.headers
    assert headers["X-Auth-Email"] == "admin@example.com"
    assert headers["X-Auth-Key"] == "secret"
    assert "Authorization" not in headers


@pytest.mark.asyncio
async def test_zone_lookup_walks_up_to_parent():
    provider = CloudflareProvider(secret="token")

    def handler(request):
        if request.url.params["name"] == "example.com":
            return zone_list()
        return ok([])

    with respx.mock(assert_all_called=False) as router:
        zones = router.get(ZONES_URL).mock(side_effect=handler)
        post = router.post(RECORDS_URL).mock(return_value=ok({}))
        result = await provider.create(
            "a.sub.example.com", TXTRecord("x"), 60, "sub.example.com"
        )
    assert result is None
    queried = [call.request.url.params["name"] for call in zones.calls]
    assert queried == ["sub.example.com", "example.com"]
    assert post.call_count == 1


@pytest.mark.asyncio
async def test_missing_zone_raises_api_error():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        zones = router.get(ZONES_URL).mock(return_value=ok([]))
        with pytest.raises(ApiError, match="No Cloudflare zone found for sub.example.com"):
            await provider.create("sub.example.com", TXTRecord("x"), 60, "sub.example.com")
    assert zones.call_count == 2


@pytest.mark.asyncio
async def test_unsuccessful_zone_listing_raises_api_error():
    provider = CloudflareProvider(secret="token")
    failure = {"errors": [{"code": 9109, "message": "bad"}], "success": False, "result": None}
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=httpx.Response(200, json=failure))
        with pytest.raises(ApiError, match="^Failed to list zones"):
            await provider.create("example.com", TXTRecord("x"), 60, "example.com")


@pytest.mark.asyncio
async def test_malformed_result_raises_serialize_error():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=httpx.Response(200, json={"result": []}))
        with pytest.raises(SerializeError):
            await provider.create("example.com", TXTRecord("x"), 60, "example.com")


@pytest.mark.asyncio
async def test_delete_looks_up_record_id():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=zone_list())
        lookup = router.get(RECORDS_URL).mock(
            return_value=ok([{"id": "rec9", "name": "www.example.com"}])
        )
        deleted = router.delete(f"{RECORDS_URL}/rec9").mock(return_value=ok({}))
        result = await provider.delete("www.example.com.", "example.com", DnsRecordType.TXT)
    assert result is None
    params = lookup.calls.last.request.url.params
    assert (params["name"], params["type"], params["match"]) == (
        "www.example.com",
        "TXT",
        "all",
    )
    assert deleted.call_count == 1


@pytest.mark.asyncio
async def test_delete_unknown_record_raises_api_error():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=zone_list())
        router.get(RECORDS_URL).mock(return_value=ok([]))
        with pytest.raises(ApiError, match="DNS Record www.example.com of type A not found"):
            await provider.delete("www.example.com", "example.com", DnsRecordType.A)


@pytest.mark.asyncio
async def test_update_patches_by_name():
    provider = CloudflareProvider(secret="token")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=zone_list())
        patched = router.route(
            method="PATCH", url=f"{RECORDS_URL}/www.example.com"
        ).mock(return_value=ok({}))
        result = await provider.update(
            "www.example.com", ARecord("192.0.2.7"), 120, "example.com"
        )
    assert result is None
    body = json.loads(patched.calls.last.request.content)
    assert "proxied" not in body
    assert (body["ttl"], body["name"], body["content"]) == (120, "www.example.com", "192.0.2.7")


@pytest.mark.asyncio
async def test_structured_record_bodies():
    provider = CloudflareProvider(secret="token")
    mx = MXRecord(exchange="mail.example.com", priority_value=10)
    srv = SRVRecord(target="sip.example.com", priority_value=1, weight=2, port=5060)
    tlsa = TLSARecord(TlsaCertUsage.DANE_EE, TlsaSelector.SPKI, TlsaMatching.SHA256, b"\x01\xab")
    caa = CAARecord(kind=CaaKind.IODEF, url="mailto:admin@example.com")
    with respx.mock(assert_all_called=False) as router:
        router.get(ZONES_URL).mock(return_value=zone_list())
        post = router.post(RECORDS_URL).mock(return_value=ok({}))
        for record in (mx, srv, tlsa, caa):
            await provider.create("example.com", record, 300, "example.com")
    bodies = [json.loads(call.request.content) for call in post.calls]
    assert bodies[0]["priority"] == 10
    assert bodies[0]["content"] == "mail.example.com"
    assert bodies[1]["data"] == {"priority": 1, "weight": 2, "port": 5060, "target": "sip.example.com"}
    assert bodies[1]["priority"] == 1
    assert bodies[2]["data"]["certificate"] == tlsa.cert_data.hex()
    assert bodies[2]["data"]["usage"] == int(TlsaCertUsage.DANE_EE)
    flags, tag, value = caa.decompose()
    assert bodies[3]["data"] == {"flags": flags, "tag": tag, "value": value}