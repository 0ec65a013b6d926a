"""Rendering of records as BIND zone file lines."""

from __future__ import annotations

from collections.abc import Iterable

from .records import (
    AAAARecord,
    ARecord,
    CAARecord,
    CNAMERecord,
    MXRecord,
    NamedDnsRecord,
    NSRecord,
    SRVRecord,
    TLSARecord,
    TXTRecord,
    into_fqdn,
)

_TXT_CHUNK = 255


def _escape_txt(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _txt_lines(name: str, text: str) -> list[str]:
    raw = text.encode("utf-8")
    if len(raw) <= _TXT_CHUNK:
        return [f'{name} IN TXT "{_escape_txt(text)}"']
    lines = [f"{name} IN TXT ("]
    for start in range(0, len(raw), _TXT_CHUNK):
        chunk = raw[start : start + _TXT_CHUNK].decode("utf-8", errors="replace")
        lines.append(f'    "{_escape_txt(chunk)}"')
    lines.append(")")
    return lines


def _record_lines(named: NamedDnsRecord) -> list[str]:
    name = named.name
    record = named.record
    match record:
        case ARecord(address=address):
            return [f"{name} IN A {address}"]
        case AAAARecord(address=address):
            return [f"{name} IN AAAA {address}"]
        case CNAMERecord(target=target):
            return [f"{name} IN CNAME {into_fqdn(target)}"]
        case NSRecord(target=target):
            return [f"{name} IN NS {into_fqdn(target)}"]
        case MXRecord():
            return [f"{name} IN MX {record.priority_value} {into_fqdn(record.exchange)}"]
        case TXTRecord(text=text):
            return _txt_lines(name, text)
        case SRVRecord():
            return [
                f"{name} IN SRV {record.priority_value} {record.weight} "
                f"{record.port} {into_fqdn(record.target)}"
            ]
        case TLSARecord():
            return [f"{name} IN TLSA {record}"]
        case CAARecord():
            return [f"{name} IN CAA {record}"]
    raise TypeError(f"unsupported record: {record!r}")


def to_bind_zone(records: Iterable[NamedDnsRecord]) -> str:
    """Render records as BIND zone file lines, one record per line."""
    return "".join(
        f"{line}\n" for named in records for line in _record_lines(named)
    )