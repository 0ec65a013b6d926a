"""A provider driving the management API of a pebble-challtestsrv test DNS server."""

from __future__ import annotations

from typing import Any

from ..http import HttpClientBuilder
from ..records import (
    AAAARecord,
    ApiError,
    ARecord,
    CAARecord,
    CNAMERecord,
    DnsRecord,
    DnsRecordType,
    TXTRecord,
    into_fqdn,
)

_CLEAR_ENDPOINTS = {
    DnsRecordType.A: "clear-a",
    DnsRecordType.AAAA: "clear-aaaa",
    DnsRecordType.CNAME: "clear-cname",
    DnsRecordType.TXT: "clear-txt",
    DnsRecordType.CAA: "clear-caa",
}


def _set_request(host: str, record: DnsRecord) -> tuple[str, dict[str, Any]]:
    """Return the endpoint and body that set ``record`` for ``host``."""
    match record:
        case ARecord(address=address):
            return "add-a", {"host": host, "addresses": [str(address)]}
        case AAAARecord(address=address):
            return "add-aaaa", {"host": host, "addresses": [str(address)]}
        case CNAMERecord(target=target):
            return "set-cname", {"host": host, "target": target}
        case TXTRecord(text=text):
            return "set-txt", {"host": host, "value": text}
        case CAARecord():
            _flags, tag, value = record.decompose()
            return "add-caa", {"host": host, "policies": [{"tag": tag, "value": value}]}
    raise ApiError(
        f"{record.record_type().value} records are not supported by Pebble"
    )


class PebbleProvider:
    """Sets and clears records on a pebble-challtestsrv instance."""

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = HttpClientBuilder().with_timeout(timeout)

    async def create(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Set ``record`` for the fully qualified ``name``."""
        await self._set_record(into_fqdn(name), record)

    async def update(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Clear the records of the same type, then set ``record``."""
        host = into_fqdn(name)
        await self._clear_record(host, record.record_type())
        await self._set_record(host, record)

    async def delete(
        self, name: str, origin: str, record_type: DnsRecordType
    ) -> None:
        """Clear the records of the given name and type."""
        await self._clear_record(into_fqdn(name), DnsRecordType(record_type))

    async def _set_record(self, host: str, record: DnsRecord) -> None:
        endpoint, body = _set_request(host, record)
        await (
            self._client.post(f"{self._base_url}/{endpoint}").with_body(body).send_raw()
        )

    async def _clear_record(self, host: str, record_type: DnsRecordType) -> None:
        endpoint = _CLEAR_ENDPOINTS.get(record_type)
        if endpoint is None:
            raise ApiError(f"{record_type.value} records are not supported by Pebble")
        await (
            self._client.post(f"{self._base_url}/{endpoint}")
            .with_body({"host": host})
            .send_raw()
        )