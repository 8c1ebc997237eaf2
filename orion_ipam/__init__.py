"""
Orion IPAM - IP address reservations against SolarWinds Orion IPAM.

This package claims free or explicitly requested addresses in an IPAM subnet,
enforces DHCP-scope and VLAN-name policies, and reconciles persisted
reservations with the live inventory.
"""

__version__ = "0.1.0"
__all__ = ["cli", "client", "inventory", "reservation"]
