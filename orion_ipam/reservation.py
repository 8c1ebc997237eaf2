"""IP address reservations against the Orion IPAM inventory.

Create claims an existing inventory address for a subnet: the next free one,
or an explicit address after checking it is valid, inside the subnet and
free. Read re-derives the remote state of a reservation and reports drift as
errors instead of healing it.

Concurrency Model:
------------------
Every operation is a sequential chain of blocking SWIS calls with no locking.
``find_free_address`` followed by ``commit`` is a check-then-act pair: two
creations racing on the same subnet can both select the same free address,
and the later commit overwrites the earlier one. SWIS has no conditional
update to close the gap. The losing reservation surfaces as
OrionOwnershipLost on its next read, because the address comment no longer
carries its ownership tag.

Error Classification:
--------------------
Nothing here is retried. Validation, policy and inventory errors are
deterministic; OrionTransportError subclasses pass through from the client
untouched. ``commit`` is the only mutating call and runs after every check,
so a failed create leaves the inventory unchanged.
"""

import dataclasses
from datetime import datetime, timezone
from typing import Optional, Tuple

from oslo_log import log as logging

from . import inventory
from .exceptions import (
    OrionAddressAlreadyAssigned,
    OrionAddressNotInSubnet,
    OrionDhcpPolicyConflict,
    OrionDhcpPolicyDrift,
    OrionDhcpScopeBlocked,
    OrionOwnershipLost,
    OrionVlanNameMismatch,
)
from .models import (
    DhcpReservation,
    IPEntity,
    ReservationRecord,
    ReservationRequest,
    StaticReservation,
)
from .validators import validate_address, validate_address_in_subnet

LOG = logging.getLogger(__name__)

# RFC 850, e.g. "Sunday, 18-Oct-26 06:41:00 UTC"
RFC850_FORMAT = "%A, %d-%b-%y %H:%M:%S %Z"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime(RFC850_FORMAT)


def _check_vlan_name(client, vlan_address: str, expected: Optional[str]) -> str:
    computed = inventory.resolve_vlan_name(client, vlan_address)
    if expected and expected != computed:
        raise OrionVlanNameMismatch(expected=expected, actual=computed, vlan_address=vlan_address)
    return computed


def _claimable_entity(client, request: ReservationRequest, subnet_id: int) -> IPEntity:
    validate_address(request.ip_address)
    validate_address_in_subnet(request.vlan_address, request.vlan_mask, request.ip_address)

    entity = inventory.find_by_address(client, request.ip_address)
    if entity.subnet_id != subnet_id:
        # Same address tracked under another (overlapping) subnet
        raise OrionAddressNotInSubnet(
            ip_address=request.ip_address,
            subnet=f"{request.vlan_address}/{request.vlan_mask} (id {subnet_id}, found in id {entity.subnet_id})",
        )
    if not entity.is_free:
        raise OrionAddressAlreadyAssigned(
            ip_address=entity.address,
            status=entity.status_name,
            comments=entity.comments,
        )
    return entity


def create(request: ReservationRequest, client) -> StaticReservation:
    """Claim an address for a reservation request.

    Args:
        request: Reservation request
        client: Object providing query() and update()

    Returns:
        StaticReservation for the claimed address

    Raises:
        OrionVlanNameMismatch: Expected VLAN name differs from inventory
        OrionSubnetNotFound: Subnet address unknown
        OrionDhcpScopeBlocked: DHCP subnet and no explicit address
        OrionDhcpPolicyConflict: DHCP subnet and an explicit address
        OrionNoFreeAddress: Subnet exhausted
        OrionInvalidAddress: Explicit address or mask malformed
        OrionAddressNotInSubnet: Explicit address outside the subnet
        OrionIPAddressNotFound: Explicit address not in inventory
        OrionAddressAlreadyAssigned: Explicit address not free
        OrionAmbiguousResult: A single-row lookup matched several rows
        OrionTransportError: Remote call failed
    """
    vlan_address = request.vlan_address

    vlan_name = _check_vlan_name(client, vlan_address, request.vlan_name)
    subnet_id = inventory.resolve_subnet_id(client, vlan_address)

    if request.avoid_dhcp_scope and inventory.is_dhcp_scope(client, vlan_address):
        if request.ip_address is None:
            raise OrionDhcpScopeBlocked(vlan_address=vlan_address)
        raise OrionDhcpPolicyConflict(ip_address=request.ip_address, vlan_address=vlan_address)

    if request.ip_address is None:
        entity = inventory.find_free_address(client, subnet_id)
    else:
        entity = _claimable_entity(client, request, subnet_id)

    inventory.commit(client, entity, request.status_code, request.comment)

    LOG.info("Reserved %s in VLAN %s (%s) for '%s'", entity.address, vlan_name, vlan_address, request.comment)
    return StaticReservation(address=entity.address, vlan_name=vlan_name, last_updated=_timestamp())


def read(record: ReservationRecord, context: ReservationRequest, client) -> ReservationRecord:
    """Refresh a reservation from inventory and detect drift.

    Args:
        record: Previously persisted reservation
        context: Request the reservation was created from
        client: Object providing query()

    Returns:
        Record with the address refreshed from inventory (DHCP placeholders
        are returned unchanged)

    Raises:
        OrionVlanNameMismatch: VLAN name changed or differs from the declared one
        OrionIPAddressNotFound: Reserved address no longer tracked
        OrionOwnershipLost: Address now belongs to someone else
        OrionDhcpPolicyDrift: Subnet became a DHCP scope under avoid_dhcp_scope
        OrionTransportError: Remote call failed
    """
    if isinstance(record, DhcpReservation):
        LOG.debug("Reservation is a DHCP placeholder, skipping inventory check")
        return record

    vlan_address = context.vlan_address
    vlan_name = _check_vlan_name(client, vlan_address, context.vlan_name or record.vlan_name)

    entity = inventory.find_by_address(client, record.address)
    if context.comment not in entity.comments and not entity.is_free:
        raise OrionOwnershipLost(
            ip_address=record.address,
            owner=context.comment,
            comments=entity.comments,
            status=entity.status_name,
        )

    if context.avoid_dhcp_scope and inventory.is_dhcp_scope(client, vlan_address):
        raise OrionDhcpPolicyDrift(vlan_address=vlan_address, ip_address=record.address)

    if entity.address != record.address:
        LOG.info("Address of reservation %s normalized by inventory to %s", record.address, entity.address)
    return dataclasses.replace(record, address=entity.address, vlan_name=vlan_name)


def update(record: ReservationRecord, request: ReservationRequest) -> ReservationRecord:
    """Accept changed request fields without touching inventory.

    Comment and status edits made after creation are not written back to
    the claimed address.
    """
    if isinstance(record, StaticReservation):
        LOG.warning(
            "Update of reservation %s is not pushed to inventory (comment '%s', status %s)",
            record.address,
            request.comment,
            request.status_code.name,
        )
    return record


def delete(record: ReservationRecord) -> None:
    """Forget a reservation without releasing its address.

    The address keeps its status and comment in inventory.
    """
    if isinstance(record, StaticReservation):
        LOG.warning("Address %s is not released back to the free pool", record.address)


def import_reservation(ip_address: str, client) -> Tuple[ReservationRequest, StaticReservation]:
    """Adopt an already-claimed inventory address.

    Args:
        ip_address: Address to adopt
        client: Object providing query()

    Returns:
        Tuple of (request describing the current claim, reservation record)

    Raises:
        OrionInvalidAddress: Address malformed
        OrionIPAddressNotFound: Address not in inventory
        OrionSubnetNotFound: Owning subnet missing
        OrionInvalidRequest: Address has no ownership comment, or its status
            code cannot be requested on create
        OrionTransportError: Remote call failed
    """
    validate_address(ip_address)

    entity = inventory.find_by_address(client, ip_address)
    vlan_address = inventory.resolve_subnet_address(client, entity.subnet_id)
    subnet = inventory.get_subnet(client, vlan_address)
    vlan_name = subnet.vlan_name

    request = ReservationRequest(
        vlan_address=vlan_address,
        comment=entity.comments,
        ip_address=entity.address,
        vlan_name=vlan_name,
        vlan_mask=subnet.cidr,
        status_code=entity.status,
    )
    LOG.info("Imported %s from subnet %s (VLAN %s)", entity.address, vlan_address, vlan_name)
    return request, StaticReservation(address=entity.address, vlan_name=vlan_name, last_updated=_timestamp())
