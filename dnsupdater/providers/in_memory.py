"""A provider that keeps records in a list, for tests and local use."""

from __future__ import annotations

import threading

from ..records import DnsRecord, DnsRecordType, NamedDnsRecord, into_fqdn


class InMemoryProvider:
    """Keeps records in a list that callers may share and inspect."""

    def __init__(self, records: list[NamedDnsRecord] | None = None) -> None:
        self.records: list[NamedDnsRecord] = [] if records is None else records
        self._lock = threading.Lock()

    async def create(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Append a record under the fully qualified ``name``."""
        with self._lock:
            self.records.append(NamedDnsRecord(into_fqdn(name), record))

    async def update(
        self, name: str, record: DnsRecord, ttl: int, origin: str
    ) -> None:
        """Replace the first record of the same name and type, or append one."""
        fqdn = into_fqdn(name)
        record_type = record.record_type()
        with self._lock:
            for index, existing in enumerate(self.records):
                if existing.name == fqdn and existing.record.record_type() == record_type:
                    self.records[index] = NamedDnsRecord(fqdn, record)
                    return
            self.records.append(NamedDnsRecord(fqdn, record))

    async def delete(
        self, name: str, origin: str, record_type: DnsRecordType
    ) -> None:
        """Remove every record of the given name and type."""
        fqdn = into_fqdn(name)
        record_type = DnsRecordType(record_type)
        with self._lock:
            self.records[:] = [
                r
                for r in self.records
                if not (r.name == fqdn and r.record.record_type() == record_type)
            ]