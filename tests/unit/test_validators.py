"""
Unit tests for address and subnet validators.
"""

import pytest

from orion_ipam.exceptions import OrionAddressNotInSubnet, OrionInvalidAddress
from orion_ipam.validators import (subnet_network, validate_address,
                                   validate_address_in_subnet, validate_mask)


class TestValidateAddress:
    """Tests for validate_address function."""

    @pytest.mark.unit
    def test_valid_addresses(self):
        """Test valid dotted-decimal addresses."""
        validate_address("10.0.0.5")
        validate_address("0.0.0.0")
        validate_address("255.255.255.255")
        validate_address("192.168.100.1")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "address",
        [
            "10.0.0",  # too few segments
            "10.0.0.0.1",  # too many segments
            "10.0.0.256",  # octet out of range
            "10.0.x.1",  # non-numeric token
            "10..0.1",  # empty segment
            "010.0.0.1",  # leading zero
            " 10.0.0.1",  # whitespace
            "2001:db8::1",  # IPv6
            "10.0.0.0/24",  # CIDR, not an address
            "",
        ],
    )
    def test_malformed_addresses(self, address):
        """Test malformed addresses raise OrionInvalidAddress."""
        with pytest.raises(OrionInvalidAddress):
            validate_address(address)

    @pytest.mark.unit
    def test_non_string_rejected(self):
        """Test integers and None are not accepted as addresses."""
        with pytest.raises(OrionInvalidAddress):
            validate_address(167772165)
        with pytest.raises(OrionInvalidAddress):
            validate_address(None)

    @pytest.mark.unit
    def test_error_names_field_and_value(self):
        with pytest.raises(OrionInvalidAddress) as excinfo:
            validate_address("10.0.0.300")
        assert excinfo.value.kwargs["field"] == "ip_address"
        assert excinfo.value.kwargs["value"] == "10.0.0.300"
        assert "10.0.0.300" in str(excinfo.value)


class TestValidateMask:
    """Tests for validate_mask function."""

    @pytest.mark.unit
    def test_valid_masks(self):
        validate_mask(0)
        validate_mask(24)
        validate_mask(32)

    @pytest.mark.unit
    def test_out_of_range(self):
        with pytest.raises(OrionInvalidAddress, match="between 0 and 32"):
            validate_mask(33)
        with pytest.raises(OrionInvalidAddress, match="between 0 and 32"):
            validate_mask(-1)

    @pytest.mark.unit
    def test_not_integer(self):
        with pytest.raises(OrionInvalidAddress, match="integer"):
            validate_mask("24")
        with pytest.raises(OrionInvalidAddress, match="integer"):
            validate_mask(True)


class TestValidateAddressInSubnet:
    """Tests for validate_address_in_subnet function."""

    @pytest.mark.unit
    def test_inside(self):
        validate_address_in_subnet("10.0.0.0", 24, "10.0.0.5")
        validate_address_in_subnet("172.16.0.0", 12, "172.31.255.254")

    @pytest.mark.unit
    def test_network_and_broadcast_edges_are_members(self):
        validate_address_in_subnet("10.0.0.0", 24, "10.0.0.0")
        validate_address_in_subnet("10.0.0.0", 24, "10.0.0.255")

    @pytest.mark.unit
    def test_single_host_subnet(self):
        validate_address_in_subnet("10.0.0.9", 32, "10.0.0.9")
        with pytest.raises(OrionAddressNotInSubnet):
            validate_address_in_subnet("10.0.0.9", 32, "10.0.0.10")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "address",
        ["10.0.1.0", "9.255.255.255", "10.0.1.5", "192.168.0.1"],
    )
    def test_outside(self, address):
        with pytest.raises(OrionAddressNotInSubnet) as excinfo:
            validate_address_in_subnet("10.0.0.0", 24, address)
        assert excinfo.value.kwargs["ip_address"] == address
        assert excinfo.value.kwargs["subnet"] == "10.0.0.0/24"

    @pytest.mark.unit
    def test_host_bits_in_subnet_address_ignored(self):
        assert str(subnet_network("10.0.0.77", 24)) == "10.0.0.0/24"
        validate_address_in_subnet("10.0.0.77", 24, "10.0.0.200")

    @pytest.mark.unit
    def test_malformed_inputs(self):
        with pytest.raises(OrionInvalidAddress):
            validate_address_in_subnet("10.0.0", 24, "10.0.0.5")
        with pytest.raises(OrionInvalidAddress):
            validate_address_in_subnet("10.0.0.0", 24, "10.0.0.500")
        with pytest.raises(OrionInvalidAddress):
            validate_address_in_subnet("10.0.0.0", 40, "10.0.0.5")
