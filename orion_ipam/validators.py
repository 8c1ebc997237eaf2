"""
Address and subnet validation functions.
"""

import ipaddress

from orion_ipam.exceptions import OrionAddressNotInSubnet, OrionInvalidAddress


def _parse_ipv4(value: object, field: str) -> ipaddress.IPv4Address:
    if not isinstance(value, str) or not value:
        raise OrionInvalidAddress(field=field, value=value, reason="expected dotted-decimal IPv4 string")

    # ipaddress rejects wrong segment counts, octets > 255, non-digits and leading zeros
    try:
        return ipaddress.IPv4Address(value)
    except ValueError as e:
        raise OrionInvalidAddress(field=field, value=value, reason=str(e))


def validate_address(address: str) -> None:
    """
    Validate a dotted-decimal IPv4 address.

    Args:
        address: IPv4 address (e.g., "10.0.0.5")

    Raises:
        OrionInvalidAddress: If the address is malformed
    """
    _parse_ipv4(address, "ip_address")


def validate_mask(mask_width: int) -> None:
    """
    Validate a CIDR prefix length.

    Args:
        mask_width: Prefix length (0-32)

    Raises:
        OrionInvalidAddress: If the prefix length is out of range
    """
    if isinstance(mask_width, bool) or not isinstance(mask_width, int):
        raise OrionInvalidAddress(field="vlan_mask", value=mask_width, reason="prefix length must be an integer")
    if mask_width < 0 or mask_width > 32:
        raise OrionInvalidAddress(field="vlan_mask", value=mask_width, reason="prefix length must be between 0 and 32")


def subnet_network(subnet_address: str, mask_width: int) -> ipaddress.IPv4Network:
    """
    Compute the network spanned by a subnet address and prefix length.

    Host bits in the subnet address are ignored (10.0.0.7/24 -> 10.0.0.0/24).
    """
    base = _parse_ipv4(subnet_address, "vlan_address")
    validate_mask(mask_width)
    return ipaddress.IPv4Network(f"{base}/{mask_width}", strict=False)


def validate_address_in_subnet(subnet_address: str, mask_width: int, address: str) -> None:
    """
    Validate that an address lies inside a subnet.

    The network and broadcast addresses count as members.

    Args:
        subnet_address: Subnet base address (e.g., "10.0.0.0")
        mask_width: Prefix length of the subnet
        address: Candidate IPv4 address

    Raises:
        OrionInvalidAddress: If any address or the mask is malformed
        OrionAddressNotInSubnet: If the address is outside the subnet
    """
    network = subnet_network(subnet_address, mask_width)
    candidate = _parse_ipv4(address, "ip_address")
    if candidate not in network:
        raise OrionAddressNotInSubnet(ip_address=address, subnet=str(network))
