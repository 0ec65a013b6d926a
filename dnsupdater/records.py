"""DNS record model, error types and name helpers."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Any, Callable, ClassVar


class DnsUpdateError(Exception):
    """Base class of every error raised by this package."""


class ProtocolError(DnsUpdateError):
    """A DNS protocol level failure."""


class ParseError(DnsUpdateError):
    """A value could not be parsed."""


class ClientError(DnsUpdateError):
    """The client could not be set up or used."""


class ResponseError(DnsUpdateError):
    """The server answered with an unexpected response."""


class ApiError(DnsUpdateError):
    """A provider API call failed."""


class SerializeError(DnsUpdateError):
    """A request or response could not be (de)serialized."""


class _DefaultMessageError(DnsUpdateError):
    """An error that carries a fixed message unless one is given."""

    default_message: ClassVar[str] = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class UnauthorizedError(_DefaultMessageError):
    """The credentials were rejected."""

    default_message = "Unauthorized"


class NotFoundError(_DefaultMessageError):
    """The requested zone or record does not exist."""

    default_message = "Not found"


class BadRequestError(_DefaultMessageError):
    """The request was rejected as malformed."""

    default_message = "Bad request"


class DnsRecordType(str, Enum):
    """A DNS record type."""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    NS = "NS"
    MX = "MX"
    TXT = "TXT"
    SRV = "SRV"
    TLSA = "TLSA"
    CAA = "CAA"

    def __str__(self) -> str:
        return self.value


class TlsaCertUsage(IntEnum):
    PKIX_TA = 0
    PKIX_EE = 1
    DANE_TA = 2
    DANE_EE = 3
    PRIVATE = 255


class TlsaSelector(IntEnum):
    FULL = 0
    SPKI = 1
    PRIVATE = 255


class TlsaMatching(IntEnum):
    RAW = 0
    SHA256 = 1
    SHA512 = 2
    PRIVATE = 255


class CaaKind(str, Enum):
    """The property tag of a CAA record."""

    ISSUE = "issue"
    ISSUE_WILD = "issuewild"
    IODEF = "iodef"


class TsigAlgorithm(Enum):
    """A TSIG algorithm."""

    HMAC_MD5 = auto()
    GSS = auto()
    HMAC_SHA1 = auto()
    HMAC_SHA224 = auto()
    HMAC_SHA256 = auto()
    HMAC_SHA256_128 = auto()
    HMAC_SHA384 = auto()
    HMAC_SHA384_192 = auto()
    HMAC_SHA512 = auto()
    HMAC_SHA512_256 = auto()


class Algorithm(Enum):
    """A DNSSEC algorithm."""

    RSASHA256 = auto()
    RSASHA512 = auto()
    ECDSAP256SHA256 = auto()
    ECDSAP384SHA384 = auto()
    ED25519 = auto()


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


def _coerce(record: Any, attribute: str, convert: Callable[[Any], Any]) -> None:
    object.__setattr__(record, attribute, convert(getattr(record, attribute)))


class DnsRecord:
    """A DNS record value; concrete records are the subclasses below."""

    __slots__ = ()
    RECORD_TYPE: ClassVar[DnsRecordType]

    def __init_subclass__(
        cls, record_type: DnsRecordType | None = None, **kwargs: Any
    ) -> None:
        super().__init_subclass__(**kwargs)
        if record_type is not None:
            cls.RECORD_TYPE = record_type

    def record_type(self) -> DnsRecordType:
        """Return the type of this record."""
        return self.RECORD_TYPE

    def priority(self) -> int | None:
        """Return the priority of MX and SRV records, None otherwise."""
        return getattr(self, "priority_value", None)


@dataclass(frozen=True)
class ARecord(DnsRecord, record_type=DnsRecordType.A):
    address: ipaddress.IPv4Address

    def __post_init__(self) -> None:
        _coerce(self, "address", ipaddress.IPv4Address)


@dataclass(frozen=True)
class AAAARecord(DnsRecord, record_type=DnsRecordType.AAAA):
    address: ipaddress.IPv6Address

    def __post_init__(self) -> None:
        _coerce(self, "address", ipaddress.IPv6Address)


@dataclass(frozen=True)
class CNAMERecord(DnsRecord, record_type=DnsRecordType.CNAME):
    target: str


@dataclass(frozen=True)
class NSRecord(DnsRecord, record_type=DnsRecordType.NS):
    target: str


@dataclass(frozen=True)
class MXRecord(DnsRecord, record_type=DnsRecordType.MX):
    exchange: str
    priority_value: int

    def __str__(self) -> str:
        return f"{self.priority_value} {self.exchange}"


@dataclass(frozen=True)
class TXTRecord(DnsRecord, record_type=DnsRecordType.TXT):
    text: str


@dataclass(frozen=True)
class SRVRecord(DnsRecord, record_type=DnsRecordType.SRV):
    target: str
    priority_value: int
    weight: int
    port: int

    def __str__(self) -> str:
        return f"{self.priority_value} {self.weight} {self.port} {self.target}"


@dataclass(frozen=True)
class TLSARecord(DnsRecord, record_type=DnsRecordType.TLSA):
    cert_usage: TlsaCertUsage
    selector: TlsaSelector
    matching: TlsaMatching
    cert_data: bytes

    def __post_init__(self) -> None:
        _coerce(self, "cert_data", bytes)

    def __str__(self) -> str:
        return (
            f"{int(self.cert_usage)} {int(self.selector)} "
            f"{int(self.matching)} {self.cert_data.hex()}"
        )


@dataclass(frozen=True)
class CAARecord(DnsRecord, record_type=DnsRecordType.CAA):
    kind: CaaKind
    issuer_critical: bool = False
    name: str | None = None
    options: tuple[KeyValue, ...] = field(default_factory=tuple)
    url: str | None = None

    def __post_init__(self) -> None:
        _coerce(self, "kind", CaaKind)
        _coerce(self, "options", tuple)
        if self.kind is CaaKind.IODEF and self.url is None:
            raise ValueError("an iodef CAA record needs a url")

    def decompose(self) -> tuple[int, str, str]:
        """Split the record into its flags, tag and value."""
        flags = 128 if self.issuer_critical else 0
        if self.kind is CaaKind.IODEF:
            return flags, self.kind.value, self.url or ""
        parts = [self.name or ""]
        parts.extend(f"{option.key}={option.value}" for option in self.options)
        return flags, self.kind.value, "; ".join(parts)

    def __str__(self) -> str:
        flags, tag, value = self.decompose()
        return f'{flags} {tag} "{value}"'


@dataclass(frozen=True)
class NamedDnsRecord:
    """A DNS record together with its owner name."""

    name: str
    record: DnsRecord


def into_fqdn(name: str) -> str:
    """Return the name with a trailing dot."""
    return name if name.endswith(".") else f"{name}."


def into_name(name: str) -> str:
    """Return the name without its trailing dot."""
    return name[:-1] if name.endswith(".") else name


def strip_origin_from_name(
    name: str, origin: str, return_if_equal: str | None = None
) -> str:
    """Return the part of ``name`` relative to ``origin``.

    When the name is the origin itself, ``return_if_equal`` is returned,
    or ``"@"`` when it is None.
    """
    name = name.rstrip(".")
    origin = origin.rstrip(".")
    if name == origin:
        return "@" if return_if_equal is None else return_if_equal
    suffix = f".{origin}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name