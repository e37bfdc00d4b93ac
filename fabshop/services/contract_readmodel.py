from __future__ import annotations

from typing import Optional

from fabshop.db import q, q1
from fabshop.forms import CustomerForm, FixtureOption, RoomForm, SlabOption, default_extras
from fabshop.utils import from_json, placeholders

_ROOM_FIELDS = (
    "room", "edge", "backsplash", "square_feet", "tear_out", "stove",
    "waterfall", "corbels", "seam", "ten_year_sealer",
)


def _fixture_map(conn, table: str, type_col: str, slab_ids: list[int]) -> dict[int, list[int]]:
    rows = q(
        conn,
        f"SELECT slab_id, {type_col} AS type_id FROM {table} WHERE slab_id IN ({placeholders(len(slab_ids))}) ORDER BY id",
        slab_ids,
    )
    out: dict[int, list[int]] = {}
    for r in rows:
        out.setdefault(int(r["slab_id"]), []).append(int(r["type_id"]))
    return out


def _room_from_slab(slab) -> dict:
    room = {f: slab[f] for f in _ROOM_FIELDS if slab[f] is not None}
    room["room_id"] = str(slab["room_uuid"])
    room["retail_price"] = float(slab["price"] or 0)
    room["ten_year_sealer"] = bool(slab["ten_year_sealer"])
    room["extras"] = from_json(slab["extras"], default_extras())
    room["slabs"] = []
    room["sink_type"] = []
    room["faucet_type"] = []
    return room


def customer_form_from_sale(conn, sale_id: int) -> Optional[CustomerForm]:
    """
    Rebuild the contract form a sale was sold from (the edit form's starting
    point). Returns None when the sale or its slabs are missing.
    """
    sale = q1(
        conn,
        """
        SELECT s.customer_id, s.seller_id, s.notes, s.price, s.project_address,
               c.name, c.address, c.postal_code, c.phone, c.email, c.company_name
        FROM sales s
        JOIN customers c ON c.id = s.customer_id
        WHERE s.id = ?
        """,
        (int(sale_id),),
    )
    if sale is None:
        return None

    slabs = q(conn, "SELECT * FROM slab_inventory WHERE sale_id = ? ORDER BY id", (int(sale_id),))
    if not slabs:
        return None

    slab_ids = [int(s["id"]) for s in slabs]
    # A slab with a remainder row was only partially sold.
    partial = {
        int(r["parent_id"])
        for r in q(
            conn,
            f"SELECT DISTINCT parent_id FROM slab_inventory WHERE parent_id IN ({placeholders(len(slab_ids))})",
            slab_ids,
        )
    }
    sinks = _fixture_map(conn, "sinks", "sink_type_id", slab_ids)
    faucets = _fixture_map(conn, "faucets", "faucet_type_id", slab_ids)

    rooms: dict[str, dict] = {}
    for slab in slabs:
        slab_id = int(slab["id"])
        room = rooms.setdefault(str(slab["room_uuid"]), _room_from_slab(slab))
        room["slabs"].append(SlabOption(id=slab_id, is_full=slab_id not in partial))

        # One entry per attached unit, so two sinks of one type stay two.
        for key, attached in (("sink_type", sinks), ("faucet_type", faucets)):
            room[key].extend(FixtureOption(type_id=t) for t in attached.get(slab_id, []))

    address = sale["address"] or ""
    project_address = sale["project_address"] or ""
    # Stored rows already passed validation when they were written.
    return CustomerForm.model_construct(
        name=sale["name"],
        customer_id=int(sale["customer_id"]),
        seller_id=int(sale["seller_id"]) if sale["seller_id"] is not None else None,
        billing_address=address,
        billing_zip_code=sale["postal_code"],
        project_address=project_address,
        same_address=project_address == address,
        phone=sale["phone"],
        email=sale["email"],
        notes_to_sale=sale["notes"] or "",
        price=float(sale["price"] or 0),
        builder=bool(sale["company_name"]),
        company_name=sale["company_name"],
        rooms=[RoomForm(**r) for r in rooms.values()],
    )
