"""DNS record management through the deSEC API."""

from __future__ import annotations

from typing import Any

from .. import records
from ..http import HttpClientBuilder

DEFAULT_API_ENDPOINT = "https://desec.io/api/v1"
MAX_RETRIES = 3

_RRSET_FIELDS = frozenset(
    {"created", "domain", "subname", "name", "records", "ttl", "type", "touched"}
)


def _representation(record: records.DnsRecord) -> tuple[str, str]:
    """Return the record type and the record content in deSEC's notation."""
    match record:
        case records.ARecord() | records.AAAARecord():
            content = str(record.address)
        case records.CNAMERecord() | records.NSRecord():
            content = records.into_fqdn(record.target)
        case records.MXRecord():
            content = f"{record.priority_value} {records.into_fqdn(record.exchange)}"
        case records.TXTRecord():
            content = f'"{record.text}"'
        case records.SRVRecord():
            content = (
                f"{record.priority_value} {record.weight} {record.port} "
                f"{records.into_fqdn(record.target)}"
            )
        case records.TLSARecord() | records.CAARecord():
            content = str(record)
        case _:
            raise TypeError(f"unsupported record: {record!r}")
    return record.record_type().value, content


def _check_rrset(payload: Any) -> None:
    if not isinstance(payload, dict) or not _RRSET_FIELDS <= payload.keys():
        raise records.SerializeError("Failed to deserialize response: malformed RRset")


class DesecProvider:
    """Creates, updates and deletes RRsets in deSEC domains."""

    def __init__(
        self,
        auth_token: str,
        timeout: float | None = None,
        endpoint: str = DEFAULT_API_ENDPOINT,
    ) -> None:
        self._client = (
            HttpClientBuilder()
            .with_header("Authorization", f"Token {auth_token}")
            .with_timeout(timeout)
        )
        self._endpoint = endpoint

    def _names(self, name: str, origin: str) -> tuple[str, str]:
        domain = records.into_name(origin)
        return domain, records.strip_origin_from_name(records.into_name(name), domain, None)

    def _rrsets_url(self, domain: str, *path: str) -> str:
        suffix = "".join(f"{part}/" for part in path)
        return f"{self._endpoint}/domains/{domain}/rrsets/{suffix}"

    async def _save(
        self,
        method: str,
        name: str,
        record: records.DnsRecord,
        ttl: int,
        origin: str,
        addressed: bool,
    ) -> None:
        domain, subname = self._names(name, origin)
        rr_type, content = _representation(record)
        url = (
            self._rrsets_url(domain, subname, rr_type)
            if addressed
            else self._rrsets_url(domain)
        )
        payload = await (
            self._client.build(method, url)
            .with_body(
                {"subname": subname, "type": rr_type, "ttl": ttl, "records": [content]}
            )
            .send_with_retry(MAX_RETRIES)
        )
        _check_rrset(payload)

    async def create(
        self, name: str, record: records.DnsRecord, ttl: int, origin: str
    ) -> None:
        """Create an RRset holding ``record``."""
        await self._save("POST", name, record, ttl, origin, addressed=False)

    async def update(
        self, name: str, record: records.DnsRecord, ttl: int, origin: str
    ) -> None:
        """Replace the RRset of the record's name and type."""
        await self._save("PUT", name, record, ttl, origin, addressed=True)

    async def delete(
        self, name: str, origin: str, record_type: records.DnsRecordType
    ) -> None:
        """Remove the RRset of the given name and type."""
        domain, subname = self._names(name, origin)
        rr_type = records.DnsRecordType(record_type).value
        payload = await self._client.delete(
            self._rrsets_url(domain, subname, rr_type)
        ).send_with_retry(MAX_RETRIES)
        if not isinstance(payload, dict):
            raise records.SerializeError(
                "Failed to deserialize response: expected an object"
            )