"""DNS record management through the OVH API."""

from __future__ import annotations

import json
import time
from enum import Enum

import httpx

from ..crypto import sha1_digest
from ..records import (
    ApiError,
    DnsRecord,
    DnsRecordType,
    NotFoundError,
    ParseError,
    SerializeError,
    into_name,
    strip_origin_from_name,
)

DEFAULT_TIMEOUT = 30.0


class OvhEndpoint(str, Enum):
    """The API endpoints OVH and its sister brands offer."""

    OVH_EU = "ovh-eu"
    OVH_CA = "ovh-ca"
    KIMSUFI_EU = "kimsufi-eu"
    KIMSUFI_CA = "kimsufi-ca"
    SOYOUSTART_EU = "soyoustart-eu"
    SOYOUSTART_CA = "soyoustart-ca"

    @classmethod
    def parse(cls, value: str) -> OvhEndpoint:
        """Return the endpoint named by ``value``, such as ``"ovh-eu"``."""
        try:
            return cls(value)
        except ValueError:
            raise ParseError(f"Invalid OVH endpoint: {value}") from None

    def api_url(self) -> str:
        """Return the base URL of this endpoint's API."""
        return _API_URLS[self]


_API_URLS = {
    OvhEndpoint.OVH_EU: "https://eu.api.ovh.com/1.0",
    OvhEndpoint.OVH_CA: "https://ca.api.ovh.com/1.0",
    OvhEndpoint.KIMSUFI_EU: "https://eu.api.kimsufi.com/1.0",
    OvhEndpoint.KIMSUFI_CA: "https://ca.api.kimsufi.com/1.0",
    OvhEndpoint.SOYOUSTART_EU: "https://eu.api.soyoustart.com/1.0",
    OvhEndpoint.SOYOUSTART_CA: "https://ca.api.soyoustart.com/1.0",
}


def _field_type_and_target(record: DnsRecord) -> tuple[str, str]:
    """Return the OVH field type and target of a record."""
    target = getattr(record, "target", None)
    if record.record_type() in (DnsRecordType.CNAME, DnsRecordType.NS):
        return record.record_type().value, target
    if record.record_type() in (DnsRecordType.A, DnsRecordType.AAAA):
        return record.record_type().value, str(record.address)
    if record.record_type() is DnsRecordType.TXT:
        return "TXT", record.text
    return record.record_type().value, str(record)


def _status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".rstrip()


def _encode(body: dict) -> str:
    try:
        return json.dumps(body, separators=(",", ":"))
    except (TypeError, ValueError) as err:
        raise SerializeError(f"Failed to serialize record: {err}") from err


class OvhProvider:
    """Creates, updates and deletes records in OVH DNS zones."""

    def __init__(
        self,
        application_key: str,
        application_secret: str,
        consumer_key: str,
        endpoint: OvhEndpoint | str = OvhEndpoint.OVH_EU,
        timeout: float | None = None,
    ) -> None:
        if not isinstance(endpoint, OvhEndpoint):
            endpoint = OvhEndpoint.parse(endpoint)
        self.application_key = application_key
        self.application_secret = application_secret
        self.consumer_key = consumer_key
        self.endpoint = endpoint.api_url()
        self.timeout = DEFAULT_TIMEOUT if timeout is None else timeout

    def generate_signature(
        self, method: str, url: str, body: str, timestamp: int
    ) -> str:
        """Return the ``X-Ovh-Signature`` value of a request."""
        data = (
            f"{self.application_secret}+{self.consumer_key}+{method}+{url}+"
            f"{body}+{timestamp}"
        )
        return f"$1${sha1_digest(data.encode('utf-8')).hex()}"

    async def _send(self, method: str, url: str, body: str = "") -> httpx.Response:
        timestamp = int(time.time())
        headers = {
            "X-Ovh-Application": self.application_key,
            "X-Ovh-Consumer": self.consumer_key,
            "X-Ovh-Signature": self.generate_signature(method, url, body, timestamp),
            "X-Ovh-Timestamp": str(timestamp),
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(
                    method, url, headers=headers, content=body or None
                )
        except httpx.HTTPError as err:
            raise ApiError(f"Failed to send request: {err}") from err

    async def _refresh(self, zone: str, action: str) -> None:
        try:
            await self._send("POST", f"{self.endpoint}/domain/zone/{zone}/refresh")
        except ApiError as err:
            raise ApiError(
                f"Failed to refresh zone (record {action} but zone not refreshed): {err}"
            ) from err

    async def _zone_name(self, origin: str) -> str:
        zone = into_name(origin).rstrip(".")
        response = await self._send("GET", f"{self.endpoint}/domain/zone/{zone}")
        if response.is_success:
            return zone
        raise ApiError(f"Zone {zone} not found or not accessible")

    @staticmethod
    def _subdomain(name: str, zone: str) -> str:
        subdomain = strip_origin_from_name(into_name(name), zone, None)
        return "" if subdomain == "@" else subdomain

    async def _record_id(self, zone: str, name: str, record_type: str) -> int:
        subdomain = self._subdomain(name, zone)
        url = (
            f"{self.endpoint}/domain/zone/{zone}/record"
            f"?fieldType={record_type}&subDomain={subdomain}"
        )
        response = await self._send("GET", url)
        if not response.is_success:
            raise ApiError(f"Failed to list records: HTTP {_status_line(response)}")
        try:
            record_ids = json.loads(response.content)
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            raise ApiError(f"Failed to parse record list: {err}") from err
        if not isinstance(record_ids, list) or not all(
            isinstance(i, int) and not isinstance(i, bool) and i >= 0
            for i in record_ids
        ):
            raise ApiError("Failed to parse record list: expected a list of ids")
        if not record_ids:
            raise NotFoundError()
        return record_ids[0]

    async def _check(self, response: httpx.Response, action: str) -> None:
        if not response.is_success:
            text = response.text if response.content is not None else "Unknown error"
            raise ApiError(
                f"Failed to {action} record: HTTP {_status_line(response)} - {text}"
            )

    async def create(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Add a record to the zone ``origin`` and refresh the zone."""
        zone = await self._zone_name(origin)
        field_type, target = _field_type_and_target(record)
        body = _encode(
            {
                "fieldType": field_type,
                "subDomain": self._subdomain(name, zone),
                "target": target,
                "ttl": ttl,
            }
        )
        response = await self._send(
            "POST", f"{self.endpoint}/domain/zone/{zone}/record", body
        )
        await self._check(response, "create")
        await self._refresh(zone, "created")

    async def update(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Replace the first record of the same name and type, then refresh."""
        zone = await self._zone_name(origin)
        field_type, target = _field_type_and_target(record)
        record_id = await self._record_id(zone, name, field_type)
        body = _encode({"target": target, "ttl": ttl})
        response = await self._send(
            "PUT", f"{self.endpoint}/domain/zone/{zone}/record/{record_id}", body
        )
        await self._check(response, "update")
        await self._refresh(zone, "updated")

    async def delete(
        self, name: str, origin: str, record_type: DnsRecordType
    ) -> None:
        """Remove the first record of the given name and type, then refresh."""
        zone = await self._zone_name(origin)
        record_id = await self._record_id(
            zone, name, DnsRecordType(record_type).value
        )
        response = await self._send(
            "DELETE", f"{self.endpoint}/domain/zone/{zone}/record/{record_id}"
        )
        await self._check(response, "delete")
        await self._refresh(zone, "deleted")