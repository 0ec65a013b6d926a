# dnsupdater

An asynchronous library for creating, updating and deleting DNS records
through the HTTP APIs of DNS hosting providers. It also renders records as
BIND zone-file lines.

## Installation

```
pip install dnsupdater
```

## Records

Records live in `dnsupdater.records` and are immutable dataclasses, one class
per record type:

| Class        | Fields                                                        |
|--------------|---------------------------------------------------------------|
| `ARecord`    | `address` (a string is turned into an `IPv4Address`)          |
| `AAAARecord` | `address` (a string is turned into an `IPv6Address`)          |
| `CNAMERecord`| `target`                                                      |
| `NSRecord`   | `target`                                                      |
| `MXRecord`   | `exchange`, `priority_value`                                  |
| `TXTRecord`  | `text`                                                        |
| `SRVRecord`  | `target`, `priority_value`, `weight`, `port`                  |
| `TLSARecord` | `cert_usage`, `selector`, `matching`, `cert_data`             |
| `CAARecord`  | `kind`, `issuer_critical`, `name`, `options`, `url`           |

Every record has `record_type()`, which returns a `DnsRecordType`, and
`priority()`, which returns the priority of MX and SRV records and `None` for
the others.

```python
from dnsupdater.records import ARecord, CAARecord, CaaKind, DnsRecordType, MXRecord

a = ARecord("192.0.2.1")
mx = MXRecord(exchange="mail.example.com", priority_value=10)

assert mx.record_type() is DnsRecordType.MX
assert mx.priority() == 10
assert a.priority() is None

caa = CAARecord(CaaKind.ISSUE, name="ca.example.com")
assert caa.decompose() == (0, "issue", "ca.example.com")
assert str(caa) == '0 issue "ca.example.com"'
```

A `NamedDnsRecord` pairs an owner name with a record. The module also holds
the name helpers `into_fqdn`, `into_name` and `strip_origin_from_name`:

```python
from dnsupdater.records import into_fqdn, into_name, strip_origin_from_name

assert into_fqdn("example.com") == "example.com."
assert into_name("example.com.") == "example.com"
assert strip_origin_from_name("www.example.com", "example.com") == "www"
assert strip_origin_from_name("example.com", "example.com") == "@"
assert strip_origin_from_name("example.com", "example.com", "") == ""
```

## Providers

Every provider offers the same three coroutines:

- `create(name, record, ttl, origin)`
- `update(name, record, ttl, origin)`
- `delete(name, origin, record_type)`

`name` is the record's full name and `origin` the zone it belongs to; each
provider works out the relative name its API expects. Timeouts are given in
seconds and default to 30.

| Module                           | Class                  | Constructor                                                                  |
|----------------------------------|------------------------|------------------------------------------------------------------------------|
| `dnsupdater.providers.bunny`       | `BunnyProvider`        | `BunnyProvider(api_key, timeout=None)`                                       |
| `dnsupdater.providers.cloudflare`  | `CloudflareProvider`   | `CloudflareProvider(secret, email=None, timeout=None)`                       |
| `dnsupdater.providers.desec`       | `DesecProvider`        | `DesecProvider(auth_token, timeout=None, endpoint=...)`                      |
| `dnsupdater.providers.digitalocean`| `DigitalOceanProvider` | `DigitalOceanProvider(auth_token, timeout=None)`                             |
| `dnsupdater.providers.ovh`         | `OvhProvider`          | `OvhProvider(application_key, application_secret, consumer_key, endpoint, timeout=None)` |
| `dnsupdater.providers.pebble`      | `PebbleProvider`       | `PebbleProvider(base_url, timeout=None)`                                     |
| `dnsupdater.providers.in_memory`   | `InMemoryProvider`     | `InMemoryProvider(records=None)`                                             |

```python
import asyncio

from dnsupdater.providers.cloudflare import CloudflareProvider
from dnsupdater.records import DnsRecordType, TXTRecord


async def main():
    provider = CloudflareProvider(secret="token")
    await provider.create(
        "_acme-challenge.example.com", TXTRecord("challenge"), 300, "example.com"
    )
    await provider.delete("_acme-challenge.example.com", "example.com", DnsRecordType.TXT)


asyncio.run(main())
```

With an `email`, `CloudflareProvider` sends it and the secret as
`X-Auth-Email` and `X-Auth-Key`; without one it sends the secret as a bearer
token.

`DigitalOceanProvider` rejects TLSA records with an `ApiError`.
`PebbleProvider` drives the management API of a pebble-challtestsrv test DNS
server and supports A, AAAA, CNAME, TXT and CAA records only.

### OVH

OVH endpoints are chosen with `OvhEndpoint`, either directly or by name
(`ovh-eu`, `ovh-ca`, `kimsufi-eu`, `kimsufi-ca`, `soyoustart-eu`,
`soyoustart-ca`). Requests are signed; `generate_signature` builds the
`X-Ovh-Signature` value. After every change the zone is refreshed.

```python
from dnsupdater.providers.ovh import OvhEndpoint, OvhProvider

provider = OvhProvider(
    application_key="placeholder",
    application_secret="secret",
    consumer_key="placeholder",
    endpoint=OvhEndpoint.parse("ovh-eu"),
)
assert OvhEndpoint.OVH_EU.api_url() == "https://eu.api.ovh.com/1.0"
```

### In memory

`InMemoryProvider` keeps `NamedDnsRecord` values in a list that you may pass
in and inspect. Names are stored fully qualified; `update` replaces the first
record of the same name and type or appends one, and `delete` removes every
record of that name and type.

```python
import asyncio

from dnsupdater.providers.in_memory import InMemoryProvider
from dnsupdater.records import ARecord

records = []
provider = InMemoryProvider(records)
asyncio.run(provider.create("www.example.com", ARecord("192.0.2.1"), 300, "example.com"))
assert records[0].name == "www.example.com."
```

## Zone files

`dnsupdater.bind.to_bind_zone` renders records as BIND zone-file lines, one
record per line. Targets are written fully qualified, and TXT values longer
than 255 bytes are split into quoted chunks inside parentheses.

```python
from dnsupdater.bind import to_bind_zone
from dnsupdater.records import MXRecord, NamedDnsRecord

zone = to_bind_zone([NamedDnsRecord("example.com.", MXRecord("mail.example.com", 10))])
assert zone == "example.com. IN MX 10 mail.example.com.\n"
```

## Lower-level helpers

- `dnsupdater.http`: `HttpClientBuilder` and `HttpClient`, the JSON-over-HTTP
  client the providers use. `send_with_retry` waits out HTTP 429 responses
  that carry a `Retry-After` header.
- `dnsupdater.crypto`: `sha1_digest`, `sha256_digest` and `hmac_sha256`.

## Errors

All failures raise subclasses of `dnsupdater.records.DnsUpdateError`:
`ApiError`, `NotFoundError`, `UnauthorizedError`, `SerializeError`,
`ParseError`, `ClientError`, `ResponseError`, `ProtocolError` and
`BadRequestError`.

## What this package does not do

- It only talks to providers over their HTTP APIs. It does not send DNS
  UPDATE messages itself, and it does not sign anything with TSIG or DNSSEC;
  `TsigAlgorithm` and `Algorithm` are plain enumerations that nothing in the
  package uses.
- It has no command-line tool; it is a library to call from your own code.