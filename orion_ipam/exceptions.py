"""Orion IPAM reservation exceptions."""


class OrionIpamException(Exception):
    """Base exception for Orion IPAM reservation errors."""

    message = "An unknown exception occurred."

    def __init__(self, message=None, **kwargs):
        """Initialize exception with optional custom message."""
        self.kwargs = kwargs
        if message:
            self.message = message
        super(OrionIpamException, self).__init__(self.message % kwargs)


class OrionInvalidAddress(OrionIpamException):
    """Malformed IPv4 address or mask."""

    message = "Invalid %(field)s '%(value)s': %(reason)s"


class OrionAddressNotInSubnet(OrionIpamException):
    """Explicit address falls outside the declared subnet."""

    message = "IP address %(ip_address)s is not in subnet %(subnet)s"


class OrionResourceNotFound(OrionIpamException):
    """Generic resource not found error.

    Use the specific subclasses (OrionSubnetNotFound, OrionIPAddressNotFound)
    when the resource type is known.
    """

    message = "Resource %(resource_id)s not found"


class OrionSubnetNotFound(OrionResourceNotFound):
    """Subnet not found in inventory."""

    message = "Subnet %(subnet)s not found"


class OrionIPAddressNotFound(OrionResourceNotFound):
    """IP address not found in inventory."""

    message = "IP address %(ip_address)s not found"


class OrionAmbiguousResult(OrionIpamException):
    """More than one row where exactly one was expected."""

    message = "Expected exactly one %(resource)s matching %(criteria)s, found %(count)d"


class OrionVlanNameMismatch(OrionIpamException):
    """Declared VLAN name disagrees with the name found in inventory."""

    message = (
        "There is mismatch in vlan name that you've provided ('%(expected)s') "
        "and computed value which is '%(actual)s' for subnet %(vlan_address)s"
    )


class OrionDhcpPolicyViolation(OrionIpamException):
    """Base class for DHCP-avoidance policy violations."""

    message = "DHCP scope policy violated for subnet %(vlan_address)s"


class OrionDhcpScopeBlocked(OrionDhcpPolicyViolation):
    """No address requested and the subnet is a DHCP scope."""

    message = (
        "No IP provided and avoid_dhcp_scope is set, but subnet "
        "%(vlan_address)s has a DHCP scope"
    )


class OrionDhcpPolicyConflict(OrionDhcpPolicyViolation):
    """Static address requested from a DHCP scope."""

    message = (
        "Cannot claim static IP %(ip_address)s from subnet %(vlan_address)s "
        "with a DHCP scope"
    )


class OrionDhcpPolicyDrift(OrionDhcpPolicyViolation):
    """Subnet became a DHCP scope after the reservation was created."""

    message = (
        "avoid_dhcp_scope is set, but subnet %(vlan_address)s now has a DHCP "
        "scope (reservation %(ip_address)s)"
    )


class OrionNoFreeAddress(OrionIpamException):
    """Subnet has no free address left.

    This is a non-retryable error: an operator must release addresses or
    pick another subnet.
    """

    message = "No free IP address in subnet %(subnet_id)s"


class OrionAddressAlreadyAssigned(OrionIpamException):
    """Explicit address is not in the free state."""

    message = (
        "IP address %(ip_address)s is already assigned "
        "(status %(status)s, comments '%(comments)s')"
    )


class OrionOwnershipLost(OrionIpamException):
    """Tracked address was reassigned to another owner."""

    message = (
        "IP address '%(ip_address)s' is not assigned to '%(owner)s' "
        "(comments '%(comments)s', status %(status)s)"
    )


class OrionInvalidRequest(OrionIpamException):
    """Reservation request is malformed."""

    message = "Invalid reservation request: %(details)s"


class OrionInvalidRecord(OrionIpamException):
    """Inventory or state returned a record that cannot be interpreted."""

    message = "Invalid %(resource)s record: %(details)s"


class OrionConfigurationError(OrionIpamException):
    """Connection configuration is incomplete or invalid.

    Non-retryable: the operator must fix the configuration file or the
    SOLARWINDS_ORION_* environment variables.
    """

    message = "Orion configuration error: %(details)s"


class OrionTransportError(OrionIpamException):
    """Base class for failures of the remote SWIS call."""

    message = "Orion API call failed: %(details)s"


class OrionAPIConnectionError(OrionTransportError):
    """API connection error."""

    message = "Failed to connect to Orion API: %(details)s"


class OrionAPITimeout(OrionTransportError):
    """API timeout error."""

    message = "Orion API request timed out after %(timeout)s seconds"


class OrionAuthenticationError(OrionTransportError):
    """Credentials rejected by the server."""

    message = "Orion API rejected credentials: %(details)s"


class OrionAPIError(OrionTransportError):
    """API returned an error response."""

    message = "Orion API error: %(details)s"
