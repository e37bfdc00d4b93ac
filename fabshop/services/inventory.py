from __future__ import annotations

from typing import Any, Optional

from fabshop.db import q


def available_slabs(conn, company_id: int, *, stone_id: Optional[int] = None) -> list[dict[str, Any]]:
    """
    Slabs that can be put on a sale: not attached to any sale. Remainders of
    partially sold or cut slabs are included and flagged via parent_id.
    """
    sql = """
        SELECT si.id, si.stone_id, st.name AS stone, st.type, si.bundle,
               si.length, si.width, si.parent_id, st.retail_price
        FROM slab_inventory si
        JOIN stones st ON st.id = si.stone_id
        WHERE st.company_id = ? AND si.sale_id IS NULL
    """
    params: list[Any] = [int(company_id)]
    if stone_id is not None:
        sql += " AND si.stone_id = ?"
        params.append(int(stone_id))
    sql += " ORDER BY st.name, si.bundle, si.id"

    out: list[dict[str, Any]] = []
    for r in q(conn, sql, params):
        out.append(
            {
                "id": int(r["id"]),
                "stone_id": int(r["stone_id"]),
                "stone": str(r["stone"]),
                "type": r["type"],
                "bundle": r["bundle"],
                "length": r["length"],
                "width": r["width"],
                "is_remnant": r["parent_id"] is not None,
                "retail_price": float(r["retail_price"] or 0),
            }
        )
    return out


def stone_summary(conn, company_id: int):
    return q(
        conn,
        """
        SELECT
          st.name AS stone,
          st.type,
          ROUND(st.retail_price, 2) AS retail_price,
          SUM(CASE WHEN si.id IS NOT NULL AND si.sale_id IS NULL AND si.parent_id IS NULL THEN 1 ELSE 0 END) AS full_slabs,
          SUM(CASE WHEN si.id IS NOT NULL AND si.sale_id IS NULL AND si.parent_id IS NOT NULL THEN 1 ELSE 0 END) AS remnants,
          SUM(CASE WHEN si.sale_id IS NOT NULL THEN 1 ELSE 0 END) AS sold
        FROM stones st
        LEFT JOIN slab_inventory si ON si.stone_id = st.id
        WHERE st.company_id = ?
        GROUP BY st.id
        ORDER BY st.name
        """,
        (int(company_id),),
    )


def _fixture_stock(conn, table: str, type_table: str, type_col: str, company_id: int):
    return q(
        conn,
        f"""
        SELECT
          t.id,
          t.name,
          t.type,
          ROUND(t.retail_price, 2) AS retail_price,
          SUM(CASE WHEN f.id IS NOT NULL AND f.slab_id IS NULL AND f.is_deleted = 0 THEN 1 ELSE 0 END) AS available,
          SUM(CASE WHEN f.slab_id IS NOT NULL THEN 1 ELSE 0 END) AS sold
        FROM {type_table} t
        LEFT JOIN {table} f ON f.{type_col} = t.id
        WHERE t.company_id = ?
        GROUP BY t.id
        ORDER BY t.name
        """,
        (int(company_id),),
    )


def sink_stock(conn, company_id: int):
    return _fixture_stock(conn, "sinks", "sink_type", "sink_type_id", company_id)


def faucet_stock(conn, company_id: int):
    return _fixture_stock(conn, "faucets", "faucet_type", "faucet_type_id", company_id)


def list_sales(conn, company_id: int, *, include_cancelled: bool = False, limit: int = 100):
    where = "" if include_cancelled else " AND s.status != 'cancelled'"
    return q(
        conn,
        f"""
        SELECT s.id, s.sale_date, c.name AS customer, c.company_name AS builder,
               u.name AS seller, s.status, ROUND(s.square_feet, 2) AS square_feet,
               ROUND(s.price, 2) AS price, s.project_address,
               (SELECT COUNT(*) FROM slab_inventory si WHERE si.sale_id = s.id) AS slabs,
               s.cancelled_date, s.installed_date
        FROM sales s
        JOIN customers c ON c.id = s.customer_id
        LEFT JOIN users u ON u.id = s.seller_id
        WHERE s.company_id = ? {where}
        ORDER BY s.id DESC
        LIMIT ?
        """,
        (int(company_id), int(limit)),
    )


def sale_slabs(conn, sale_id: int):
    return q(
        conn,
        """
        SELECT si.id, st.name AS stone, si.bundle, si.room, si.square_feet,
               si.price, si.cut_date
        FROM slab_inventory si
        JOIN stones st ON st.id = si.stone_id
        WHERE si.sale_id = ?
        ORDER BY si.id
        """,
        (int(sale_id),),
    )
