"""
Simple JSON-backed state store for reservations.

Each entry keeps the request a reservation was created from next to the
record returned by the engine, so later reads can re-validate it.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def get_state_dir(configured: Optional[str] = None) -> Path:
    """
    Resolve the directory used for persistent state.

    Priority:
    1) `ORION_IPAM_STATE_DIR` env var, if set
    2) `configured` (the `[state] state_dir` option), if set
    3) `/var/lib/orion-ipam` if writable
    4) `$XDG_STATE_HOME/orion-ipam` or `~/.local/state/orion-ipam` as fallback
    """
    env = os.environ.get("ORION_IPAM_STATE_DIR")
    if env:
        return Path(env)

    if configured:
        return Path(configured)

    candidates: list[Path] = [Path("/var/lib/orion-ipam")]
    xdg_state_home = os.environ.get("XDG_STATE_HOME")
    if xdg_state_home:
        candidates.append(Path(xdg_state_home) / "orion-ipam")
    else:
        candidates.append(Path.home() / ".local" / "state" / "orion-ipam")

    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
            probe = candidate / ".write_test"
            probe.write_text("ok", encoding="utf-8")
            probe.unlink(missing_ok=True)
            return candidate
        except OSError:
            continue

    return Path(".orion-ipam-state")


def _reservations_file(state_dir: Optional[str] = None) -> Path:
    return get_state_dir(state_dir) / "reservations.json"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    with open(path, "r", encoding="utf-8") as file:
        return json.load(file)


def _atomic_write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=2, ensure_ascii=False, sort_keys=True)
            file.write("\n")
        os.replace(tmp_path, path)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass


def list_reservations(name: Optional[str] = None, state_dir: Optional[str] = None) -> List[Dict[str, Any]]:
    items = _load_json(_reservations_file(state_dir), {"items": []}).get("items", [])
    if name:
        items = [i for i in items if i.get("name") == name]
    return items


def get_reservation(name: str, state_dir: Optional[str] = None) -> Optional[Dict[str, Any]]:
    items = list_reservations(name=name, state_dir=state_dir)
    return items[0] if items else None


def upsert_reservation(entry: Dict[str, Any], state_dir: Optional[str] = None) -> None:
    path = _reservations_file(state_dir)
    data = _load_json(path, {"items": []})
    items = data.get("items", [])
    previous = [i for i in items if i.get("name") == entry.get("name")]
    items = [i for i in items if i.get("name") != entry.get("name")]
    if "created_at" not in entry:
        entry["created_at"] = previous[0].get("created_at") if previous else _utc_now_iso()
    entry["updated_at"] = _utc_now_iso()
    items.append(entry)
    data["items"] = sorted(items, key=lambda x: x.get("name", ""))
    _atomic_write_json(path, data)


def delete_reservation(name: str, state_dir: Optional[str] = None) -> bool:
    path = _reservations_file(state_dir)
    data = _load_json(path, {"items": []})
    items = data.get("items", [])
    new_items = [i for i in items if i.get("name") != name]
    if len(new_items) == len(items):
        return False
    data["items"] = new_items
    _atomic_write_json(path, data)
    return True
