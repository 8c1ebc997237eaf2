"""
Pytest configuration and fixtures.
"""

import copy
import shutil
import tempfile
from pathlib import Path

import pytest


class FakeSwisClient:
    """In-memory stand-in for OrionClient.

    Answers the SWQL statements issued by orion_ipam.inventory from lists of
    subnet and IP node rows, and applies updates to the IP node rows.
    """

    def __init__(self, subnets=None, ip_nodes=None):
        self.subnets = copy.deepcopy(subnets or [])
        self.ip_nodes = copy.deepcopy(ip_nodes or [])
        self.queries = []
        self.updates = []

    def query(self, query, parameters=None):
        params = dict(parameters or {})
        self.queries.append((query, params))

        if "FROM IPAM.Subnet" in query:
            if "address" in params:
                rows = [s for s in self.subnets if s["address"] == params["address"]]
            else:
                rows = [s for s in self.subnets if s["subnetid"] == params["subnet_id"]]
        elif "FROM IPAM.IPNode" in query:
            if "ip_address" in params:
                rows = [n for n in self.ip_nodes if n["ipaddress"] == params["ip_address"]]
            else:
                rows = [
                    n
                    for n in self.ip_nodes
                    if n["subnetid"] == params["subnet_id"] and n["status"] == params["status"]
                ]
        else:
            raise AssertionError(f"unexpected query: {query}")

        return copy.deepcopy(rows)

    def update(self, uri, fields):
        self.updates.append((uri, dict(fields)))
        for node in self.ip_nodes:
            if node["uri"] == uri:
                node["status"] = fields["Status"]
                node["comments"] = fields["Comments"]

    def node(self, ip_address):
        return next(n for n in self.ip_nodes if n["ipaddress"] == ip_address)


def subnet_row(subnet_id, address, vlan, cidr=24, group_type="Subnet"):
    return {
        "subnetid": subnet_id,
        "uri": f"swis://orion/Orion/IPAM.Subnet/SubnetId={subnet_id}",
        "cidr": cidr,
        "grouptypetext": group_type,
        "address": address,
        "vlan": vlan,
    }


def ip_node_row(node_id, subnet_id, ip_address, status=2, comments=""):
    return {
        "ipnodeid": node_id,
        "subnetid": subnet_id,
        "ipaddress": ip_address,
        "comments": comments,
        "status": status,
        "uri": f"swis://orion/Orion/IPAM.IPNode/IpNodeId={node_id}",
    }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def make_client():
    """Factory for FakeSwisClient instances with custom inventory."""
    return FakeSwisClient


@pytest.fixture
def make_subnet():
    return subnet_row


@pytest.fixture
def make_ip_node():
    return ip_node_row


@pytest.fixture
def inventory_subnets():
    return [
        subnet_row(10, "10.0.0.0", "prod-a"),
        subnet_row(20, "10.0.1.0", "dhcp-b", group_type="DHCP Scope"),
        subnet_row(30, "10.0.2.0", "empty-c"),
    ]


@pytest.fixture
def inventory_ip_nodes():
    return [
        ip_node_row(101, 10, "10.0.0.1", status=1, comments="gateway"),
        ip_node_row(110, 10, "10.0.0.10"),
        ip_node_row(105, 10, "10.0.0.5"),
        ip_node_row(107, 10, "10.0.0.7", status=1, comments="web-01 (owner: team-a)"),
        ip_node_row(108, 10, "10.0.0.8", status=4, comments="reserved for lb"),
        ip_node_row(201, 20, "10.0.1.20"),
        ip_node_row(301, 30, "10.0.2.1", status=1, comments="gateway"),
    ]


@pytest.fixture
def fake_client(inventory_subnets, inventory_ip_nodes):
    """FakeSwisClient loaded with a small default inventory.

    - 10.0.0.0/24 "prod-a": static, free .5 and .10, .7 owned by web-01,
      .8 reserved
    - 10.0.1.0/24 "dhcp-b": DHCP scope, free .20
    - 10.0.2.0/24 "empty-c": static, no free addresses
    """
    return FakeSwisClient(inventory_subnets, inventory_ip_nodes)
