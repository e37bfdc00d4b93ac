from __future__ import annotations

import logging
from typing import Optional

from fabshop.db import q1, transaction, u, x
from fabshop.errors import SaleNotFound, SlabNotFound
from fabshop.utils import iso_now

logger = logging.getLogger(__name__)

STATUS_PARTIALLY_CUT = "partially cut"
STATUS_CUT = "cut"
STATUS_INSTALLED = "installed"


def _open_sale(conn, sale_id: int, company_id: Optional[int]):
    if company_id is None:
        sale = q1(conn, "SELECT * FROM sales WHERE id=?", (int(sale_id),))
    else:
        sale = q1(conn, "SELECT * FROM sales WHERE id=? AND company_id=?", (int(sale_id), int(company_id)))
    if sale is None:
        raise SaleNotFound()
    if sale["status"] == "cancelled":
        raise ValueError("Sale is cancelled.")
    return sale


def cut_slab(
    conn,
    *,
    sale_id: int,
    slab_id: int,
    leftover_length: Optional[float] = None,
    leftover_width: Optional[float] = None,
    company_id: Optional[int] = None,
) -> str:
    """
    Marks a sold slab as cut. A leftover with valid dimensions goes back into
    stock as a child of the cut slab.

    Returns the sale's new status: 'partially cut' while any of its slabs is
    still uncut, else 'cut'.
    """
    with transaction(conn):
        _open_sale(conn, sale_id, company_id)
        slab = q1(
            conn,
            "SELECT id, stone_id, bundle, url, cut_date FROM slab_inventory WHERE id=? AND sale_id=?",
            (int(slab_id), int(sale_id)),
        )
        if slab is None:
            raise SlabNotFound()

        if slab["cut_date"] is None:
            u(conn, "UPDATE slab_inventory SET cut_date=? WHERE id=?", (iso_now(), int(slab_id)))

        has_leftover = (
            leftover_length is not None
            and leftover_width is not None
            and float(leftover_length) > 0
            and float(leftover_width) > 0
        )
        if has_leftover:
            leftover_id = x(
                conn,
                """
                INSERT INTO slab_inventory (stone_id, bundle, length, width, url, parent_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    slab["stone_id"],
                    slab["bundle"],
                    float(leftover_length),
                    float(leftover_width),
                    slab["url"],
                    int(slab_id),
                    iso_now(),
                ),
            )
            logger.info("Leftover slab %s added from slab %s", leftover_id, slab_id)

        remaining = q1(
            conn,
            "SELECT COUNT(*) AS n FROM slab_inventory WHERE sale_id=? AND cut_date IS NULL",
            (int(sale_id),),
        )
        status = STATUS_PARTIALLY_CUT if int(remaining["n"]) > 0 else STATUS_CUT
        u(conn, "UPDATE sales SET status=? WHERE id=?", (status, int(sale_id)))

    logger.info("Slab %s cut for sale %s, sale is now %s", slab_id, sale_id, status)
    return status


def mark_installed(conn, sale_id: int, *, company_id: Optional[int] = None) -> None:
    with transaction(conn):
        _open_sale(conn, sale_id, company_id)
        u(
            conn,
            "UPDATE sales SET status=?, installed_date=? WHERE id=?",
            (STATUS_INSTALLED, iso_now(), int(sale_id)),
        )
    logger.info("Sale %s installed", sale_id)
