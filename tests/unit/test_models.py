"""
Unit tests for inventory and reservation models.
"""

import pytest

from orion_ipam.exceptions import OrionInvalidRecord, OrionInvalidRequest
from orion_ipam.models import (AddressStatus, DhcpReservation, IPEntity,
                               ReservationRequest, ScopeKind,
                               StaticReservation, Subnet, record_from_dict,
                               record_to_dict)


class TestEnums:
    @pytest.mark.unit
    def test_only_available_is_free(self):
        assert AddressStatus.AVAILABLE.is_free
        assert not AddressStatus.USED.is_free
        assert not AddressStatus.RESERVED.is_free
        assert not AddressStatus.TRANSIENT.is_free

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "group_type, expected",
        [
            ("DHCP Scope", ScopeKind.DHCP),
            ("dhcp", ScopeKind.DHCP),
            ("Subnet", ScopeKind.STATIC),
            ("Supernet", ScopeKind.STATIC),
            ("", ScopeKind.STATIC),
            (None, ScopeKind.STATIC),
        ],
    )
    def test_scope_kind_from_group_type(self, group_type, expected):
        assert ScopeKind.from_group_type(group_type) is expected


class TestRows:
    @pytest.mark.unit
    def test_subnet_from_row(self, make_subnet):
        subnet = Subnet.from_row(make_subnet(20, "10.0.1.0", "dhcp-b", cidr=23, group_type="DHCP Scope"))
        assert subnet.subnet_id == 20
        assert subnet.cidr == 23
        assert subnet.vlan_name == "dhcp-b"
        assert subnet.scope_kind is ScopeKind.DHCP

    @pytest.mark.unit
    def test_subnet_null_vlan_becomes_empty(self, make_subnet):
        row = make_subnet(10, "10.0.0.0", None)
        assert Subnet.from_row(row).vlan_name == ""

    @pytest.mark.unit
    def test_subnet_missing_field(self, make_subnet):
        row = make_subnet(10, "10.0.0.0", "prod-a")
        del row["subnetid"]
        with pytest.raises(OrionInvalidRecord, match="subnetid"):
            Subnet.from_row(row)

    @pytest.mark.unit
    def test_ip_entity_from_row(self, make_ip_node):
        entity = IPEntity.from_row(make_ip_node(105, 10, "10.0.0.5", status=1, comments="web"))
        assert entity.status == AddressStatus.USED
        assert not entity.is_free
        assert entity.status_name == "USED"
        assert entity.comments == "web"
        assert entity.uri.endswith("IpNodeId=105")

    @pytest.mark.unit
    def test_ip_entity_null_comments(self, make_ip_node):
        row = make_ip_node(105, 10, "10.0.0.5")
        row["comments"] = None
        assert IPEntity.from_row(row).comments == ""

    @pytest.mark.unit
    def test_ip_entity_unnamed_status_is_assigned(self, make_ip_node):
        """Test status codes outside the named set load as assigned."""
        entity = IPEntity.from_row(make_ip_node(109, 10, "10.0.0.9", status=16))
        assert entity.status == 16
        assert not entity.is_free
        assert entity.status_name == "16"

    @pytest.mark.unit
    def test_ip_entity_only_available_is_free(self, make_ip_node):
        assert IPEntity.from_row(make_ip_node(105, 10, "10.0.0.5", status=2)).is_free
        assert not IPEntity.from_row(make_ip_node(105, 10, "10.0.0.5", status=0)).is_free

    @pytest.mark.unit
    def test_ip_entity_non_integer_status(self, make_ip_node):
        with pytest.raises(OrionInvalidRecord, match="not an integer"):
            IPEntity.from_row(make_ip_node(105, 10, "10.0.0.5", status="free"))


class TestReservationRequest:
    @pytest.mark.unit
    def test_defaults(self):
        request = ReservationRequest(vlan_address="10.0.0.0", comment="web-02")
        assert request.ip_address is None
        assert request.vlan_name is None
        assert request.status_code is AddressStatus.USED
        assert request.avoid_dhcp_scope is False

    @pytest.mark.unit
    def test_empty_strings_mean_not_supplied(self):
        request = ReservationRequest(vlan_address="10.0.0.0", comment="web-02", ip_address="", vlan_name="")
        assert request.ip_address is None
        assert request.vlan_name is None

    @pytest.mark.unit
    def test_comment_required(self):
        with pytest.raises(OrionInvalidRequest, match="comment is required"):
            ReservationRequest(vlan_address="10.0.0.0", comment="")

    @pytest.mark.unit
    def test_mask_required_with_explicit_address(self):
        with pytest.raises(OrionInvalidRequest, match="vlan_mask is required"):
            ReservationRequest(vlan_address="10.0.0.0", comment="db", ip_address="10.0.0.5")

    @pytest.mark.unit
    def test_status_code_coerced(self):
        request = ReservationRequest(vlan_address="10.0.0.0", comment="db", status_code=4)
        assert request.status_code is AddressStatus.RESERVED

    @pytest.mark.unit
    def test_unknown_status_code(self):
        with pytest.raises(OrionInvalidRequest, match="status_code 3"):
            ReservationRequest(vlan_address="10.0.0.0", comment="db", status_code=3)

    @pytest.mark.unit
    def test_dict_roundtrip_keeps_status_as_int(self):
        request = ReservationRequest(
            vlan_address="10.0.0.0",
            comment="db",
            ip_address="10.0.0.5",
            vlan_mask=24,
            status_code=AddressStatus.RESERVED,
            avoid_dhcp_scope=True,
        )
        data = request.to_dict()
        assert data["status_code"] == 4
        assert type(data["status_code"]) is int
        assert ReservationRequest.from_dict(data) == request


class TestRecordSerialization:
    @pytest.mark.unit
    def test_static_record(self):
        record = StaticReservation(address="10.0.0.5", vlan_name="prod-a", last_updated="now")
        data = record_to_dict(record)
        assert data == {
            "kind": "static",
            "id": "10.0.0.5",
            "ip_address": "10.0.0.5",
            "vlan_name": "prod-a",
            "last_updated": "now",
        }
        assert record_from_dict(data) == record

    @pytest.mark.unit
    def test_dhcp_record(self):
        record = DhcpReservation(vlan_name="dhcp-b")
        data = record_to_dict(record)
        assert data["id"] == "dhcp"
        assert data["ip_address"] == "dhcp"
        assert record_from_dict(data) == record

    @pytest.mark.unit
    def test_legacy_dhcp_placeholder(self):
        record = record_from_dict({"id": "dhcp", "ip_address": "dhcp", "vlan_name": "dhcp-b"})
        assert isinstance(record, DhcpReservation)
        assert record.id == "dhcp"

    @pytest.mark.unit
    def test_legacy_static_record(self):
        record = record_from_dict({"id": "10.0.0.5", "ip_address": "10.0.0.5", "vlan_name": "prod-a"})
        assert record == StaticReservation(address="10.0.0.5", vlan_name="prod-a")

    @pytest.mark.unit
    def test_unknown_kind(self):
        with pytest.raises(OrionInvalidRecord, match="unknown kind"):
            record_from_dict({"kind": "pool", "ip_address": "10.0.0.5"})

    @pytest.mark.unit
    def test_static_without_address(self):
        with pytest.raises(OrionInvalidRecord, match="missing ip_address"):
            record_from_dict({"kind": "static", "vlan_name": "prod-a"})
