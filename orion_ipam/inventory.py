"""Typed SWQL lookups against the IPAM inventory.

Every lookup that expects a single row raises a NotFound exception on zero
rows and OrionAmbiguousResult on more than one; it never picks a row on the
caller's behalf. Transport failures propagate unchanged.
"""

import ipaddress
from typing import Any, Callable, Dict, List

from oslo_log import log as logging

from .exceptions import (
    OrionAmbiguousResult,
    OrionInvalidRecord,
    OrionIPAddressNotFound,
    OrionNoFreeAddress,
    OrionResourceNotFound,
    OrionSubnetNotFound,
)
from .models import AddressStatus, IPEntity, ScopeKind, Subnet

LOG = logging.getLogger(__name__)

_SUBNET_COLUMNS = (
    "SubnetId AS subnetid, Uri AS uri, CIDR AS cidr, "
    "GroupTypeText AS grouptypetext, Address AS address, VLAN AS vlan"
)
_IPNODE_COLUMNS = (
    "IpNodeId AS ipnodeid, SubnetId AS subnetid, IPAddress AS ipaddress, "
    "Comments AS comments, Status AS status, Uri AS uri"
)

SUBNET_BY_ADDRESS = f"SELECT {_SUBNET_COLUMNS} FROM IPAM.Subnet WHERE Address = @address"
SUBNET_BY_ID = f"SELECT {_SUBNET_COLUMNS} FROM IPAM.Subnet WHERE SubnetId = @subnet_id"
IPNODE_BY_ADDRESS = f"SELECT {_IPNODE_COLUMNS} FROM IPAM.IPNode WHERE IPAddress = @ip_address"
IPNODES_BY_STATUS = (
    f"SELECT {_IPNODE_COLUMNS} FROM IPAM.IPNode "
    "WHERE SubnetId = @subnet_id AND Status = @status"
)


def _single_row(
    rows: List[Dict[str, Any]],
    not_found: Callable[[], OrionResourceNotFound],
    resource: str,
    criteria: str,
) -> Dict[str, Any]:
    if not rows:
        raise not_found()
    if len(rows) > 1:
        LOG.warning("Lookup of %s by %s returned %d rows", resource, criteria, len(rows))
        raise OrionAmbiguousResult(resource=resource, criteria=criteria, count=len(rows))
    return rows[0]


def _address_key(entity: IPEntity) -> ipaddress.IPv4Address:
    try:
        return ipaddress.IPv4Address(entity.address)
    except ValueError:
        raise OrionInvalidRecord(resource="ip address", details=f"unparsable address '{entity.address}'")


def get_subnet(client, subnet_address: str) -> Subnet:
    """Fetch the subnet whose base address is ``subnet_address``.

    Raises:
        OrionSubnetNotFound: No such subnet
        OrionAmbiguousResult: Several subnets share the address
    """
    rows = client.query(SUBNET_BY_ADDRESS, {"address": subnet_address})
    LOG.debug("Subnet lookup for %s returned %d rows", subnet_address, len(rows))
    row = _single_row(
        rows,
        lambda: OrionSubnetNotFound(subnet=subnet_address),
        "subnet",
        f"address {subnet_address}",
    )
    return Subnet.from_row(row)


def get_subnet_by_id(client, subnet_id: int) -> Subnet:
    """Fetch a subnet by inventory id.

    Raises:
        OrionSubnetNotFound: No such subnet
        OrionAmbiguousResult: Several rows share the id
    """
    rows = client.query(SUBNET_BY_ID, {"subnet_id": subnet_id})
    row = _single_row(
        rows,
        lambda: OrionSubnetNotFound(subnet=f"id {subnet_id}"),
        "subnet",
        f"id {subnet_id}",
    )
    return Subnet.from_row(row)


def resolve_subnet_id(client, subnet_address: str) -> int:
    return get_subnet(client, subnet_address).subnet_id


def resolve_subnet_address(client, subnet_id: int) -> str:
    return get_subnet_by_id(client, subnet_id).address


def resolve_vlan_name(client, subnet_address: str) -> str:
    return get_subnet(client, subnet_address).vlan_name


def is_dhcp_scope(client, subnet_address: str) -> bool:
    """Return True if the subnet is classified as a DHCP scope."""
    subnet = get_subnet(client, subnet_address)
    LOG.debug(
        "Subnet %s group type '%s' -> %s",
        subnet_address,
        subnet.group_type,
        subnet.scope_kind.value,
    )
    return subnet.scope_kind is ScopeKind.DHCP


def find_free_address(client, subnet_id: int) -> IPEntity:
    """Return the free address with the lowest numeric value in a subnet.

    The remote query has no guaranteed order, so rows are sorted here to
    keep the choice stable for a given inventory snapshot.

    Raises:
        OrionNoFreeAddress: Subnet exhausted
    """
    rows = client.query(IPNODES_BY_STATUS, {"subnet_id": subnet_id, "status": int(AddressStatus.AVAILABLE)})
    entities = [IPEntity.from_row(row) for row in rows]
    free = [e for e in entities if e.is_free]

    if not free:
        raise OrionNoFreeAddress(subnet_id=subnet_id)

    free.sort(key=_address_key)
    LOG.debug("Subnet %s has %d free addresses, first is %s", subnet_id, len(free), free[0].address)
    return free[0]


def find_by_address(client, ip_address: str) -> IPEntity:
    """Fetch the inventory record of an address.

    Raises:
        OrionIPAddressNotFound: Address not tracked
        OrionAmbiguousResult: Address present in several subnets
    """
    rows = client.query(IPNODE_BY_ADDRESS, {"ip_address": ip_address})
    row = _single_row(
        rows,
        lambda: OrionIPAddressNotFound(ip_address=ip_address),
        "ip address",
        f"address {ip_address}",
    )
    return IPEntity.from_row(row)


def commit(client, entity: IPEntity, status: AddressStatus, comment: str) -> None:
    """Write status and comment onto an address.

    Only the Status and Comments properties are sent. The entity is not
    re-read afterwards.
    """
    client.update(entity.uri, {"Status": int(status), "Comments": comment})
    LOG.info(
        "Claimed %s (subnet %s) with status %s for '%s'",
        entity.address,
        entity.subnet_id,
        AddressStatus(status).name,
        comment,
    )
