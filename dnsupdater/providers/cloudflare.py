"""DNS record management through the Cloudflare API."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from ..http import HttpClientBuilder
from ..records import (
    AAAARecord,
    ApiError,
    ARecord,
    CAARecord,
    CNAMERecord,
    DnsRecord,
    DnsRecordType,
    MXRecord,
    NSRecord,
    SerializeError,
    SRVRecord,
    TLSARecord,
    TXTRecord,
    into_name,
)

API_URL = "https://api.cloudflare.com/client/v4"
MAX_RETRIES = 3


def _content(record: DnsRecord) -> dict[str, Any]:
    """Return the type and content fields of a record as the API expects them."""
    match record:
        case ARecord(address=address):
            return {"type": "A", "content": str(address)}
        case AAAARecord(address=address):
            return {"type": "AAAA", "content": str(address)}
        case CNAMERecord(target=target):
            return {"type": "CNAME", "content": target}
        case NSRecord(target=target):
            return {"type": "NS", "content": target}
        case MXRecord():
            return {
                "type": "MX",
                "content": record.exchange,
                "priority": record.priority_value,
            }
        case TXTRecord(text=text):
            return {"type": "TXT", "content": text}
        case SRVRecord():
            return {
                "type": "SRV",
                "data": {
                    "priority": record.priority_value,
                    "weight": record.weight,
                    "port": record.port,
                    "target": record.target,
                },
            }
        case TLSARecord():
            return {
                "type": "TLSA",
                "data": {
                    "usage": int(record.cert_usage),
                    "selector": int(record.selector),
                    "matching_type": int(record.matching),
                    "certificate": record.cert_data.hex(),
                },
            }
        case CAARecord():
            flags, tag, value = record.decompose()
            return {"type": "CAA", "data": {"flags": flags, "tag": tag, "value": value}}
    raise TypeError(f"unsupported record: {record!r}")


def _api_result(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict) or not {"errors", "success", "result"} <= payload.keys():
        raise SerializeError("Failed to deserialize response: malformed API result")
    return payload


def _unwrap(payload: Any, action: str) -> Any:
    result = _api_result(payload)
    if result["success"]:
        return result["result"]
    raise ApiError(f"Failed to {action}: {result['errors']}")


def _find_id(entries: Any, name: str) -> str | None:
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry.get("id")
    return None


class CloudflareProvider:
    """Creates, updates and deletes records in Cloudflare zones."""

    def __init__(
        self, secret: str, email: str | None = None, timeout: float | None = None
    ) -> None:
        builder = HttpClientBuilder()
        if email is not None:
            builder = builder.with_header("X-Auth-Email", email).with_header(
                "X-Auth-Key", secret
            )
        else:
            builder = builder.with_header("Authorization", f"Bearer {secret}")
        self._client = builder.with_timeout(timeout)

    async def _zone_id(self, origin: str) -> str:
        origin = into_name(origin)
        candidate = origin
        while True:
            payload = await self._client.get(
                f"{API_URL}/zones?{urlencode({'name': candidate})}"
            ).send_with_retry(MAX_RETRIES)
            zone_id = _find_id(_unwrap(payload, "list zones"), candidate)
            if zone_id is not None:
                return zone_id
            _, dot, rest = candidate.partition(".")
            if not dot or "." not in rest:
                raise ApiError(f"No Cloudflare zone found for {origin}")
            candidate = rest

    async def _record_id(
        self, zone_id: str, name: str, record_type: DnsRecordType
    ) -> str:
        name = into_name(name)
        query = urlencode({"name": name, "type": record_type.value, "match": "all"})
        payload = await self._client.get(
            f"{API_URL}/zones/{zone_id}/dns_records?{query}"
        ).send_with_retry(MAX_RETRIES)
        record_id = _find_id(_unwrap(payload, "list DNS records"), name)
        if record_id is None:
            raise ApiError(
                f"DNS Record {name} of type {record_type.value} not found"
            )
        return record_id

    async def create(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Add a record to the zone that holds ``origin``."""
        zone_id = await self._zone_id(origin)
        body: dict[str, Any] = {"ttl": ttl}
        priority = record.priority()
        if priority is not None:
            body["priority"] = priority
        body["proxied"] = False
        body["name"] = into_name(name)
        body.update(_content(record))
        payload = await (
            self._client.post(f"{API_URL}/zones/{zone_id}/dns_records")
            .with_body(body)
            .send_with_retry(MAX_RETRIES)
        )
        _api_result(payload)

    async def update(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Patch the record addressed by ``name`` in the zone of ``origin``."""
        name = into_name(name)
        zone_id = await self._zone_id(origin)
        body: dict[str, Any] = {"ttl": ttl, "name": name, **_content(record)}
        payload = await (
            self._client.patch(f"{API_URL}/zones/{zone_id}/dns_records/{name}")
            .with_body(body)
            .send_with_retry(MAX_RETRIES)
        )
        _api_result(payload)

    async def delete(
        self, name: str, origin: str, record_type: DnsRecordType
    ) -> None:
        """Remove the record of the given name and type."""
        zone_id = await self._zone_id(origin)
        record_id = await self._record_id(zone_id, name, DnsRecordType(record_type))
        payload = await self._client.delete(
            f"{API_URL}/zones/{zone_id}/dns_records/{record_id}"
        ).send_with_retry(MAX_RETRIES)
        _api_result(payload)