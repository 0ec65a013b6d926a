"""DNS record management through the DigitalOcean API."""

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
    strip_origin_from_name,
)

API_URL = "https://api.digitalocean.com/v2"
MAX_RETRIES = 3

_SUPPORTED_TYPES = frozenset(DnsRecordType) - {DnsRecordType.TLSA}


def _record_data(record: DnsRecord) -> dict[str, Any]:
    """Return the type-specific fields of a record as the API expects them."""
    match record:
        case ARecord(address=address):
            return {"type": "A", "data": str(address)}
        case AAAARecord(address=address):
            return {"type": "AAAA", "data": str(address)}
        case CNAMERecord(target=target):
            return {"type": "CNAME", "data": target}
        case NSRecord(target=target):
            return {"type": "NS", "data": target}
        case MXRecord():
            return {"type": "MX", "data": record.exchange, "priority": record.priority_value}
        case TXTRecord(text=text):
            return {"type": "TXT", "data": text}
        case SRVRecord():
            return {
                "type": "SRV",
                "data": record.target,
                "priority": record.priority_value,
                "port": record.port,
                "weight": record.weight,
            }
        case TLSARecord():
            raise ApiError("TLSA records are not supported by DigitalOcean")
        case CAARecord():
            flags, tag, value = record.decompose()
            return {"type": "CAA", "data": value, "flags": flags, "tag": tag}
    raise TypeError(f"unsupported record: {record!r}")


class DigitalOceanProvider:
    """Creates, updates and deletes records in DigitalOcean domains."""

    def __init__(self, auth_token: str, timeout: float | None = None) -> None:
        self._client = (
            HttpClientBuilder()
            .with_header("Authorization", f"Bearer {auth_token}")
            .with_timeout(timeout)
        )

    async def create(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Add a record to the domain ``origin``."""
        name = into_name(name)
        domain = into_name(origin)
        subdomain = strip_origin_from_name(name, domain, None)
        body = {"ttl": ttl, "name": subdomain, **_record_data(record)}
        await (
            self._client.post(f"{API_URL}/domains/{domain}/records")
            .with_body(body)
            .send_raw()
        )

    async def update(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Replace the existing record of the same name and type."""
        name = into_name(name)
        domain = into_name(origin)
        subdomain = strip_origin_from_name(name, domain, None)
        record_id = await self._record_id(name, domain, record.record_type())
        body = {"ttl": ttl, "name": subdomain, **_record_data(record)}
        await (
            self._client.put(f"{API_URL}/domains/{domain}/records/{record_id}")
            .with_body(body)
            .send_raw()
        )

    async def delete(
        self, name: str, origin: str, record_type: DnsRecordType
    ) -> None:
        """Remove the record of the given name and type."""
        name = into_name(name)
        domain = into_name(origin)
        record_id = await self._record_id(name, domain, DnsRecordType(record_type))
        await self._client.delete(
            f"{API_URL}/domains/{domain}/records/{record_id}"
        ).send_raw()

    async def _record_id(
        self, name: str, domain: str, record_type: DnsRecordType
    ) -> int:
        subdomain = strip_origin_from_name(name, domain, None)
        query = urlencode({"name": name, "type": record_type.value})
        payload = await self._client.get(
            f"{API_URL}/domains/{domain}/records?{query}"
        ).send_with_retry(MAX_RETRIES)
        if not isinstance(payload, dict) or not isinstance(
            payload.get("domain_records"), list
        ):
            raise SerializeError("Failed to deserialize response: missing domain_records")
        if record_type in _SUPPORTED_TYPES:
            for entry in payload["domain_records"]:
                if (
                    isinstance(entry, dict)
                    and entry.get("name") == subdomain
                    and entry.get("type") == record_type.value
                    and "id" in entry
                ):
                    return entry["id"]
        raise ApiError(
            f"DNS Record {subdomain} of type {record_type.value} not found"
        )