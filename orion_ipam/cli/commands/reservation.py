"""
Reservation management commands.
"""

import dataclasses
from typing import Any, Dict, Optional, Tuple

import typer

from orion_ipam import reservation as engine
from orion_ipam.cli.lib.state import delete_reservation as state_delete_reservation
from orion_ipam.cli.lib.state import get_reservation as state_get_reservation
from orion_ipam.cli.lib.state import list_reservations as state_list_reservations
from orion_ipam.cli.lib.state import upsert_reservation as state_upsert_reservation
from orion_ipam.client import build_client
from orion_ipam.exceptions import OrionInvalidRequest, OrionIpamException, OrionResourceNotFound
from orion_ipam.models import (
    AddressStatus,
    ReservationRecord,
    ReservationRequest,
    record_from_dict,
    record_to_dict,
)

app = typer.Typer(help="Reservation management commands")


def _state_dir(ctx: typer.Context) -> Optional[str]:
    return ctx.obj["conf"].state.state_dir


def _load(ctx: typer.Context, name: str) -> Tuple[Dict[str, Any], ReservationRequest, ReservationRecord]:
    entry = state_get_reservation(name, state_dir=_state_dir(ctx))
    if entry is None:
        raise OrionResourceNotFound(resource_id=f"reservation {name}")
    return entry, ReservationRequest.from_dict(entry["request"]), record_from_dict(entry["record"])


def _save(ctx: typer.Context, name: str, request: ReservationRequest, record: ReservationRecord) -> None:
    state_upsert_reservation(
        {
            "name": name,
            "request": request.to_dict(),
            "record": record_to_dict(record),
        },
        state_dir=_state_dir(ctx),
    )


def _ensure_absent(ctx: typer.Context, name: str) -> None:
    if state_get_reservation(name, state_dir=_state_dir(ctx)) is not None:
        raise OrionInvalidRequest(details=f"reservation {name} already exists")


def _echo_record(record: ReservationRecord) -> None:
    typer.echo(f"  Address: {record.id}")
    typer.echo(f"  VLAN: {record.vlan_name}")
    typer.echo(f"  Last updated: {record.last_updated}")


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Reservation name"),
    vlan_address: str = typer.Option(..., "--vlan-address", help="Subnet base address (e.g., 10.0.0.0)"),
    comment: str = typer.Option(..., "--comment", help="Ownership tag written to the address"),
    ip_address: Optional[str] = typer.Option(None, "--ip-address", help="Explicit address to claim (optional)"),
    vlan_name: Optional[str] = typer.Option(None, "--vlan-name", help="Expected VLAN name (optional)"),
    vlan_mask: Optional[int] = typer.Option(None, "--vlan-mask", help="Subnet prefix length (required with --ip-address)"),
    status_code: int = typer.Option(
        int(AddressStatus.USED), "--status-code", help="Status to set: 1 used, 2 available, 4 reserved, 8 transient"
    ),
    avoid_dhcp_scope: bool = typer.Option(False, "--avoid-dhcp-scope", help="Refuse subnets with a DHCP scope"),
):
    """
    Reserve an address.

    Claims the next free address in the subnet, or the explicit --ip-address.
    """
    try:
        _ensure_absent(ctx, name)
        request = ReservationRequest(
            vlan_address=vlan_address,
            comment=comment,
            ip_address=ip_address,
            vlan_name=vlan_name,
            vlan_mask=vlan_mask,
            status_code=status_code,
            avoid_dhcp_scope=avoid_dhcp_scope,
        )

        typer.echo(f"Creating reservation: {name}")

        record = engine.create(request, build_client(ctx.obj["conf"]))
        try:
            _save(ctx, name, request, record)
        except OSError as e:
            # The address is already claimed in inventory at this point
            typer.echo(f"Error saving reservation {name}: {e}", err=True)
            typer.echo(
                f"Address {record.id} remains claimed; adopt it with: "
                f"orion-ipam reservation import {name} {record.id}",
                err=True,
            )
            raise typer.Exit(1)
        _echo_record(record)

        typer.echo(f"Reservation {name} created successfully")

    except OrionIpamException as e:
        typer.echo(f"Error creating reservation: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def read(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Reservation name"),
):
    """
    Refresh a reservation from inventory.

    Fails if the address changed owner, the VLAN name drifted, or the subnet
    gained a DHCP scope while --avoid-dhcp-scope was set.
    """
    try:
        _, request, record = _load(ctx, name)
        refreshed = engine.read(record, request, build_client(ctx.obj["conf"]))
        _save(ctx, name, request, refreshed)

        typer.echo(f"Reservation {name} is in sync")
        _echo_record(refreshed)

    except OrionIpamException as e:
        typer.echo(f"Error reading reservation: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def update(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Reservation name"),
    comment: Optional[str] = typer.Option(None, "--comment", help="New ownership tag"),
    status_code: Optional[int] = typer.Option(None, "--status-code", help="New status code"),
):
    """
    Change the declared comment or status.

    The change is stored locally only; the address in inventory keeps its
    current comment and status.
    """
    try:
        _, request, record = _load(ctx, name)

        changes: Dict[str, Any] = {}
        if comment is not None:
            changes["comment"] = comment
        if status_code is not None:
            changes["status_code"] = status_code
        new_request = dataclasses.replace(request, **changes)

        record = engine.update(record, new_request)
        _save(ctx, name, new_request, record)

        typer.echo(f"Reservation {name} updated (inventory not modified)")

    except OrionIpamException as e:
        typer.echo(f"Error updating reservation: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Reservation name"),
):
    """
    Forget a reservation.

    The address is not released in inventory.
    """
    try:
        _, _, record = _load(ctx, name)
        engine.delete(record)
        state_delete_reservation(name, state_dir=_state_dir(ctx))

        typer.echo(f"Reservation {name} deleted (address {record.id} not released)")

    except OrionIpamException as e:
        typer.echo(f"Error deleting reservation: {e}", err=True)
        raise typer.Exit(1)


@app.command("import")
def import_(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Reservation name"),
    ip_address: str = typer.Argument(..., help="Address already claimed in inventory"),
):
    """
    Adopt an address that is already claimed in inventory.
    """
    try:
        _ensure_absent(ctx, name)

        typer.echo(f"Importing reservation: {name}")

        request, record = engine.import_reservation(ip_address, build_client(ctx.obj["conf"]))
        _save(ctx, name, request, record)
        _echo_record(record)
        typer.echo(f"  Subnet: {request.vlan_address}/{request.vlan_mask}")
        typer.echo(f"  Comment: {request.comment}")

        typer.echo(f"Reservation {name} imported successfully")

    except OrionIpamException as e:
        typer.echo(f"Error importing reservation: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def list(ctx: typer.Context):
    """
    List all reservations.
    """
    try:
        entries = state_list_reservations(state_dir=_state_dir(ctx))
        if not entries:
            typer.echo("No reservations found")
            return
        for entry in entries:
            record = entry.get("record", {})
            request = entry.get("request", {})
            typer.echo(
                f"{entry.get('name')} ip={record.get('ip_address')} vlan={record.get('vlan_name')} "
                f"subnet={request.get('vlan_address')} comment={request.get('comment')}"
            )

    except (OSError, ValueError) as e:
        typer.echo(f"Error listing reservations: {e}", err=True)
        raise typer.Exit(1)
