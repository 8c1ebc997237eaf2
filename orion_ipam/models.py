"""Inventory and reservation data model."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union

from orion_ipam.exceptions import OrionInvalidRecord, OrionInvalidRequest

DHCP_PLACEHOLDER = "dhcp"


class AddressStatus(IntEnum):
    """IPAM address status codes."""

    USED = 1
    AVAILABLE = 2
    RESERVED = 4
    TRANSIENT = 8

    @property
    def is_free(self) -> bool:
        return self is AddressStatus.AVAILABLE

    @classmethod
    def label(cls, code: int) -> str:
        """Name of a status code, or the bare number for codes outside the enum."""
        try:
            return cls(code).name
        except ValueError:
            return str(code)


class ScopeKind(str, Enum):
    """How addresses in a subnet are handed out."""

    STATIC = "static"
    DHCP = "dhcp"

    @classmethod
    def from_group_type(cls, group_type: Optional[str]) -> "ScopeKind":
        if group_type and "dhcp" in group_type.lower():
            return cls.DHCP
        return cls.STATIC


def _require(row: Dict[str, Any], key: str, resource: str) -> Any:
    if key not in row or row[key] is None:
        raise OrionInvalidRecord(resource=resource, details=f"missing field '{key}' in {row!r}")
    return row[key]


def _as_int(value: Any, key: str, resource: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise OrionInvalidRecord(resource=resource, details=f"field '{key}' is not an integer: {value!r}")


@dataclass(frozen=True)
class Subnet:
    """IPAM subnet row.

    Attributes:
        subnet_id: Inventory identity
        uri: SWIS entity URI
        cidr: Prefix length
        group_type: Remote classifier text (e.g., "Subnet", "DHCP Scope")
        address: Base address
        vlan_name: Display name of the VLAN
    """

    subnet_id: int
    uri: str
    cidr: int
    group_type: str
    address: str
    vlan_name: str

    @property
    def scope_kind(self) -> ScopeKind:
        return ScopeKind.from_group_type(self.group_type)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Subnet":
        return cls(
            subnet_id=_as_int(_require(row, "subnetid", "subnet"), "subnetid", "subnet"),
            uri=_require(row, "uri", "subnet"),
            cidr=_as_int(_require(row, "cidr", "subnet"), "cidr", "subnet"),
            group_type=row.get("grouptypetext") or "",
            address=_require(row, "address", "subnet"),
            vlan_name=row.get("vlan") or "",
        )


@dataclass(frozen=True)
class IPEntity:
    """IPAM address slot row.

    ``status`` is the raw inventory code. Only AVAILABLE (2) is free; any
    other value, including codes this package does not name, is assigned.
    """

    ip_node_id: int
    subnet_id: int
    address: str
    comments: str
    status: int
    uri: str

    @property
    def is_free(self) -> bool:
        return self.status == AddressStatus.AVAILABLE

    @property
    def status_name(self) -> str:
        return AddressStatus.label(self.status)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "IPEntity":
        return cls(
            ip_node_id=_as_int(_require(row, "ipnodeid", "ip address"), "ipnodeid", "ip address"),
            subnet_id=_as_int(_require(row, "subnetid", "ip address"), "subnetid", "ip address"),
            address=_require(row, "ipaddress", "ip address"),
            comments=row.get("comments") or "",
            status=_as_int(_require(row, "status", "ip address"), "status", "ip address"),
            uri=_require(row, "uri", "ip address"),
        )


@dataclass
class ReservationRequest:
    """Caller input for a reservation.

    Attributes:
        vlan_address: Subnet base address to allocate from
        comment: Ownership tag written to the claimed address
        ip_address: Explicit address to claim (None to take the next free one)
        vlan_name: Expected VLAN name, checked against inventory
        vlan_mask: Subnet prefix length, required with an explicit address
        status_code: Status written to the claimed address
        avoid_dhcp_scope: Refuse subnets that have a DHCP scope
    """

    vlan_address: str
    comment: str
    ip_address: Optional[str] = None
    vlan_name: Optional[str] = None
    vlan_mask: Optional[int] = None
    status_code: AddressStatus = AddressStatus.USED
    avoid_dhcp_scope: bool = False

    def __post_init__(self):
        if not self.vlan_address:
            raise OrionInvalidRequest(details="vlan_address is required")
        if not self.comment:
            raise OrionInvalidRequest(details="comment is required")

        self.ip_address = self.ip_address or None
        self.vlan_name = self.vlan_name or None

        if self.ip_address is not None and self.vlan_mask is None:
            raise OrionInvalidRequest(details="vlan_mask is required when ip_address is given")

        try:
            self.status_code = AddressStatus(self.status_code)
        except ValueError:
            allowed = ", ".join(str(int(s)) for s in AddressStatus)
            raise OrionInvalidRequest(details=f"status_code {self.status_code!r} is not one of {allowed}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vlan_address": self.vlan_address,
            "comment": self.comment,
            "ip_address": self.ip_address,
            "vlan_name": self.vlan_name,
            "vlan_mask": self.vlan_mask,
            "status_code": int(self.status_code),
            "avoid_dhcp_scope": self.avoid_dhcp_scope,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReservationRequest":
        return cls(
            vlan_address=data.get("vlan_address", ""),
            comment=data.get("comment", ""),
            ip_address=data.get("ip_address"),
            vlan_name=data.get("vlan_name"),
            vlan_mask=data.get("vlan_mask"),
            status_code=data.get("status_code", AddressStatus.USED),
            avoid_dhcp_scope=bool(data.get("avoid_dhcp_scope", False)),
        )


@dataclass(frozen=True)
class StaticReservation:
    """Reservation holding a claimed inventory address."""

    address: str
    vlan_name: str
    last_updated: Optional[str] = None

    @property
    def id(self) -> str:
        return self.address


@dataclass(frozen=True)
class DhcpReservation:
    """Placeholder reservation whose address is left to DHCP."""

    vlan_name: Optional[str] = None
    last_updated: Optional[str] = None

    @property
    def id(self) -> str:
        return DHCP_PLACEHOLDER


ReservationRecord = Union[StaticReservation, DhcpReservation]


def record_to_dict(record: ReservationRecord) -> Dict[str, Any]:
    if isinstance(record, DhcpReservation):
        return {
            "kind": "dhcp",
            "id": record.id,
            "ip_address": DHCP_PLACEHOLDER,
            "vlan_name": record.vlan_name,
            "last_updated": record.last_updated,
        }
    return {
        "kind": "static",
        "id": record.id,
        "ip_address": record.address,
        "vlan_name": record.vlan_name,
        "last_updated": record.last_updated,
    }


def record_from_dict(data: Dict[str, Any]) -> ReservationRecord:
    """Load a persisted record.

    Records written before the "kind" tag existed mark DHCP placeholders with
    id == ip_address == "dhcp".
    """
    kind = data.get("kind")
    if kind is None:
        if data.get("id") == DHCP_PLACEHOLDER and data.get("ip_address") == DHCP_PLACEHOLDER:
            kind = "dhcp"
        else:
            kind = "static"

    if kind == "dhcp":
        return DhcpReservation(vlan_name=data.get("vlan_name"), last_updated=data.get("last_updated"))
    if kind == "static":
        address = data.get("ip_address") or data.get("id")
        if not address:
            raise OrionInvalidRecord(resource="reservation", details=f"missing ip_address in {data!r}")
        return StaticReservation(
            address=address,
            vlan_name=data.get("vlan_name") or "",
            last_updated=data.get("last_updated"),
        )
    raise OrionInvalidRecord(resource="reservation", details=f"unknown kind '{kind}'")
