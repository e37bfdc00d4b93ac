from __future__ import annotations

from typing import Any

from fabshop.db import q
from fabshop.forms import CustomerForm, RoomForm
from fabshop.utils import placeholders


def extra_amount(extra: Any) -> float:
    """
    Extras are either a plain amount or a mapping carrying a `price`
    (e.g. {"type": "ogee", "price": 120}).
    """
    if not extra:
        return 0.0
    if isinstance(extra, bool):
        raise ValueError("Invalid extra type")
    if isinstance(extra, (int, float, str)):
        return float(extra)
    if isinstance(extra, dict):
        return float(extra.get("price") or 0)
    raise ValueError("Invalid extra type")


def room_price(room: RoomForm, sink_prices: dict[int, float], faucet_prices: dict[int, float]) -> float:
    total = float(room.square_feet or 0) * float(room.retail_price or 0)
    for extra in room.extras.values():
        total += extra_amount(extra)
    for sink in room.sink_type:
        total += float(sink_prices.get(int(sink.type_id), 0) or 0)
    for faucet in room.faucet_type:
        total += float(faucet_prices.get(int(faucet.type_id), 0) or 0)
    return round(total, 2)


def type_prices(conn, table: str, type_ids) -> dict[int, float]:
    ids = sorted({int(i) for i in type_ids})
    if not ids:
        return {}
    rows = q(conn, f"SELECT id, retail_price FROM {table} WHERE id IN ({placeholders(len(ids))})", ids)
    return {int(r["id"]): float(r["retail_price"] or 0) for r in rows}


def contract_price(conn, form: CustomerForm) -> float:
    sink_prices = type_prices(conn, "sink_type", [s.type_id for r in form.rooms for s in r.sink_type])
    faucet_prices = type_prices(conn, "faucet_type", [f.type_id for r in form.rooms for f in r.faucet_type])
    return round(sum(room_price(r, sink_prices, faucet_prices) for r in form.rooms), 2)
