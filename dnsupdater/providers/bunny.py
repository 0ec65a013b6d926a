"""DNS record management through the bunny.net DNS API."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from .. import records
from ..http import HttpClientBuilder

API_URL = "https://api.bunny.net/dnszone"
MAX_RETRIES = 3


def _type_fields(record: records.DnsRecord) -> dict[str, Any]:
    """Return the type-specific fields of a record as the API expects them."""
    fields: dict[str, Any] = {"Type": record.record_type().value}
    match record:
        case records.ARecord() | records.AAAARecord():
            fields["Value"] = str(record.address)
        case records.CNAMERecord() | records.NSRecord():
            fields["Value"] = record.target
        case records.TXTRecord():
            fields["Value"] = record.text
        case records.MXRecord():
            fields.update(Value=record.exchange, Priority=record.priority_value)
        case records.SRVRecord():
            fields.update(
                Value=record.target,
                Priority=record.priority_value,
                Port=record.port,
                Weight=record.weight,
            )
        case records.TLSARecord():
            fields["Value"] = str(record)
        case records.CAARecord():
            fields["Value"] = record.decompose()[2]
        case _:
            raise TypeError(f"unsupported record: {record!r}")
    return fields


def _record_data(name: str, record: records.DnsRecord, ttl: int) -> dict[str, Any]:
    data: dict[str, Any] = {"Name": name, **_type_fields(record), "Ttl": ttl}
    if isinstance(record, records.CAARecord):
        flags, tag, _value = record.decompose()
        data["Flags"] = flags
        data["Tag"] = tag
    return data


class BunnyProvider:
    """Creates, updates and deletes records in bunny.net DNS zones."""

    def __init__(self, api_key: str, timeout: float | None = None) -> None:
        self._client = (
            HttpClientBuilder().with_header("AccessKey", api_key).with_timeout(timeout)
        )

    async def create(
        self, name: str, record: records.DnsRecord, ttl: int, origin: str
    ) -> None:
        """Add a record to the zone of ``origin``."""
        zone, relative = await self._locate(name, origin)
        await (
            self._client.put(f"{API_URL}/{zone['Id']}/records")
            .with_body(_record_data(relative, record, ttl))
            .send_with_retry(MAX_RETRIES)
        )

    async def update(
        self, name: str, record: records.DnsRecord, ttl: int, origin: str
    ) -> None:
        """Replace the existing record of the same name and type."""
        zone, relative = await self._locate(name, origin)
        existing = self._find_record(zone, relative, record.record_type())
        body = {"Id": existing["Id"], **_record_data(existing["Name"], record, ttl)}
        await (
            self._client.post(f"{API_URL}/{zone['Id']}/records/{existing['Id']}")
            .with_body(body)
            .send_with_retry(MAX_RETRIES)
        )

    async def delete(
        self, name: str, origin: str, record_type: records.DnsRecordType
    ) -> None:
        """Remove the record of the given name and type."""
        zone, relative = await self._locate(name, origin)
        existing = self._find_record(
            zone, relative, records.DnsRecordType(record_type)
        )
        await self._client.delete(
            f"{API_URL}/{zone['Id']}/records/{existing['Id']}"
        ).send_with_retry(MAX_RETRIES)

    async def _locate(self, name: str, origin: str) -> tuple[dict[str, Any], str]:
        """Return the zone of ``origin`` and ``name`` relative to it."""
        zone = await self._zone_data(origin)
        relative = records.strip_origin_from_name(
            records.into_name(name), zone["Domain"], ""
        )
        return zone, relative

    async def _zone_data(self, origin: str) -> dict[str, Any]:
        origin = records.into_name(origin)
        query = urlencode({"search": origin})
        payload = await self._client.get(f"{API_URL}?{query}").send_with_retry(
            MAX_RETRIES
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("Items"), list):
            raise records.SerializeError("Failed to deserialize response: missing Items")
        for zone in payload["Items"]:
            if isinstance(zone, dict) and zone.get("Domain") == origin:
                if "Id" not in zone:
                    raise records.SerializeError(
                        "Failed to deserialize response: missing Id"
                    )
                return zone
        raise records.ApiError(f"DNS Record {origin} not found")

    @staticmethod
    def _find_record(
        zone: dict[str, Any], name: str, record_type: records.DnsRecordType
    ) -> dict[str, Any]:
        for entry in zone.get("Records") or []:
            if entry.get("Name") == name and entry.get("Type") == record_type.value:
                return entry
        raise records.NotFoundError()