from __future__ import annotations

import logging
from typing import Optional

from fabshop.db import q, q1, transaction, u, x
from fabshop.errors import FaucetUnavailable, SaleNotFound, SinkUnavailable, SlabNotFound, SlabUnavailable
from fabshop.forms import CustomerForm, RoomForm
from fabshop.services.contract_readmodel import customer_form_from_sale
from fabshop.services.customers import customer_address, resolve_customer, set_company_name
from fabshop.services.pricing import contract_price
from fabshop.services.users import User
from fabshop.utils import iso_now, placeholders, to_json

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_CANCELLED = "cancelled"

# (instance table, type table, type column, error)
_SINKS = ("sinks", "sink_type", "sink_type_id", SinkUnavailable)
_FAUCETS = ("faucets", "faucet_type", "faucet_type_id", FaucetUnavailable)

# form fields customer resolution writes back
_RESOLVED_FIELDS = ("customer_id", "billing_address", "project_address")


def _room_values(room: RoomForm) -> tuple:
    return (
        room.room_id,
        room.room,
        room.edge,
        room.seam,
        room.backsplash,
        room.tear_out,
        float(room.square_feet or 0),
        room.stove,
        int(room.ten_year_sealer),
        room.waterfall,
        int(room.corbels or 0),
        float(room.retail_price or 0),
        to_json(room.extras),
    )


class Contract:
    """
    A customer sale built from a validated contract form.

    sale_id is None until `sell` creates the sale. Every mutating method runs in
    one transaction: either all slabs, remainders and fixtures are written, or
    nothing is.
    """

    def __init__(self, conn, data: CustomerForm, sale_id: Optional[int] = None):
        self.conn = conn
        self.data = data
        self.sale_id = sale_id

    @classmethod
    def from_sales_id(cls, conn, sale_id: int) -> "Contract":
        data = customer_form_from_sale(conn, int(sale_id))
        if data is None:
            raise SaleNotFound()
        return cls(conn, data, int(sale_id))

    # -------------------------
    # Lifecycle
    # -------------------------

    def sell(self, user: User) -> int:
        submitted = {f: getattr(self.data, f) for f in _RESOLVED_FIELDS}
        try:
            with transaction(self.conn):
                customer_id = self._resolve_customer(user)

                self.sale_id = x(
                    self.conn,
                    """
                    INSERT INTO sales (
                        customer_id, seller_id, company_id, sale_date, notes, status,
                        square_feet, price, project_address, cancelled_date, installed_date
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, NULL, NULL)
                    """,
                    (
                        customer_id,
                        int(user.id),
                        int(user.company_id),
                        iso_now(),
                        self.data.notes_to_sale or None,
                        STATUS_PENDING,
                        float(self.data.total_square_feet),
                        self._price(),
                        self._project_address(customer_id, user),
                    ),
                )
                self._apply_rooms(user)
        except Exception:
            self.sale_id = None
            for field, value in submitted.items():
                setattr(self.data, field, value)
            raise

        logger.info(
            "Sale %s created for customer %s by user %s (%d rooms)",
            self.sale_id, self.data.customer_id, user.id, len(self.data.rooms),
        )
        return int(self.sale_id)

    def unsell(self, user: Optional[User] = None) -> None:
        if self.sale_id is None:
            raise SaleNotFound()

        with transaction(self.conn):
            self._load_sale(user)
            slab_ids = self._sale_slab_ids()
            self._release_fixtures()
            self._delete_remainders(slab_ids)
            self._clear_slabs()
            u(
                self.conn,
                "UPDATE sales SET status = ?, cancelled_date = ? WHERE id = ?",
                (STATUS_CANCELLED, iso_now(), int(self.sale_id)),
            )

        logger.info("Sale %s cancelled, %d slabs returned to stock", self.sale_id, len(slab_ids))

    def edit(self, user: User) -> None:
        if self.sale_id is None:
            raise SaleNotFound()

        with transaction(self.conn):
            sale = self._load_sale(user)
            if sale["status"] == STATUS_CANCELLED:
                raise ValueError("Cancelled sales cannot be edited.")

            customer_id = self._resolve_customer(user)
            u(
                self.conn,
                """
                UPDATE sales
                SET customer_id = ?, notes = ?, square_feet = ?, price = ?, project_address = ?
                WHERE id = ? AND company_id = ?
                """,
                (
                    customer_id,
                    self.data.notes_to_sale or None,
                    float(self.data.total_square_feet),
                    self._price(),
                    self._project_address(customer_id, user),
                    int(self.sale_id),
                    int(user.company_id),
                ),
            )

            previous = set(self._sale_slab_ids())
            kept = {s.id for room in self.data.rooms for s in room.slabs}
            self._release_fixtures()
            self._clear_slabs()
            self._delete_remainders(sorted(previous - kept))
            self._apply_rooms(user)

        logger.info("Sale %s edited by user %s", self.sale_id, user.id)

    # -------------------------
    # Steps
    # -------------------------

    def _resolve_customer(self, user: User) -> int:
        customer_id = resolve_customer(self.conn, self.data, user)
        self.data.customer_id = customer_id
        if self.data.company_name is not None:
            set_company_name(self.conn, customer_id, user.company_id, self.data.company_name)
        return customer_id

    def _price(self) -> float:
        if self.data.price:
            return float(self.data.price)
        return contract_price(self.conn, self.data)

    def _project_address(self, customer_id: int, user: User) -> str:
        return (
            self.data.project_address
            or self.data.billing_address
            or customer_address(self.conn, customer_id, user.company_id)
        )

    def _load_sale(self, user: Optional[User]):
        if user is None:
            sale = q1(self.conn, "SELECT * FROM sales WHERE id=?", (int(self.sale_id),))
        else:
            sale = q1(
                self.conn,
                "SELECT * FROM sales WHERE id=? AND company_id=?",
                (int(self.sale_id), int(user.company_id)),
            )
        if sale is None:
            raise SaleNotFound()
        return sale

    def _apply_rooms(self, user: User) -> None:
        for room in self.data.rooms:
            for slab in room.slabs:
                row = self._check_slab(slab.id, user)
                self._sell_slab(slab.id, room)

                # A cut slab keeps whatever pieces the cut produced.
                if row["cut_date"] is not None:
                    continue
                # A remainder that was sold on another sale still counts.
                children = q(
                    self.conn,
                    "SELECT id, sale_id FROM slab_inventory WHERE parent_id=?",
                    (int(slab.id),),
                )
                if not slab.is_full and not children:
                    self._duplicate_slab(slab.id)
                elif slab.is_full and any(c["sale_id"] is None for c in children):
                    self._delete_remainders([slab.id])

            # Fixtures are sold once per room, on the room's first slab.
            if room.slabs:
                first = room.slabs[0].id
                for sink in room.sink_type:
                    self._claim(_SINKS, sink.type_id, first, user)
                for faucet in room.faucet_type:
                    self._claim(_FAUCETS, faucet.type_id, first, user)

    def _check_slab(self, slab_id: int, user: User):
        row = q1(
            self.conn,
            """
            SELECT si.id, si.sale_id, si.cut_date
            FROM slab_inventory si
            JOIN stones s ON s.id = si.stone_id
            WHERE si.id = ? AND s.company_id = ?
            """,
            (int(slab_id), int(user.company_id)),
        )
        if row is None:
            raise SlabNotFound()
        if row["sale_id"] is not None:
            raise SlabUnavailable()
        return row

    def _sell_slab(self, slab_id: int, room: RoomForm) -> None:
        u(
            self.conn,
            """
            UPDATE slab_inventory
            SET room_uuid = ?, room = ?, edge = ?, seam = ?, backsplash = ?, tear_out = ?,
                square_feet = ?, stove = ?, ten_year_sealer = ?, waterfall = ?, corbels = ?,
                price = ?, extras = ?, sale_id = ?
            WHERE id = ?
            """,
            (*_room_values(room), int(self.sale_id), int(slab_id)),
        )

    def _duplicate_slab(self, slab_id: int) -> int:
        src = q1(
            self.conn,
            "SELECT stone_id, bundle, length, width, url FROM slab_inventory WHERE id=?",
            (int(slab_id),),
        )
        if src is None:
            raise SlabNotFound()
        return x(
            self.conn,
            """
            INSERT INTO slab_inventory (stone_id, bundle, length, width, url, parent_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (src["stone_id"], src["bundle"], src["length"], src["width"], src["url"], int(slab_id), iso_now()),
        )

    def _claim(self, fixture: tuple, type_id: int, slab_id: int, user: User) -> None:
        table, type_table, type_col, error = fixture
        kind = q1(
            self.conn,
            f"SELECT retail_price FROM {type_table} WHERE id=? AND company_id=?",
            (int(type_id), int(user.company_id)),
        )
        if kind is None:
            raise error()

        n = u(
            self.conn,
            f"""
            UPDATE {table}
            SET slab_id = ?, price = ?, is_deleted = 1
            WHERE id = (
                SELECT id FROM {table}
                WHERE {type_col} = ? AND slab_id IS NULL AND is_deleted = 0
                ORDER BY id
                LIMIT 1
            )
            """,
            (int(slab_id), float(kind["retail_price"] or 0), int(type_id)),
        )
        if n != 1:
            raise error()

    def _sale_slab_ids(self) -> list[int]:
        rows = q(self.conn, "SELECT id FROM slab_inventory WHERE sale_id=? ORDER BY id", (int(self.sale_id),))
        return [int(r["id"]) for r in rows]

    def _release_fixtures(self) -> None:
        for table in ("sinks", "faucets"):
            u(
                self.conn,
                f"""
                UPDATE {table}
                SET slab_id = NULL, is_deleted = 0, price = NULL
                WHERE slab_id IN (SELECT id FROM slab_inventory WHERE sale_id = ?)
                """,
                (int(self.sale_id),),
            )

    def _delete_remainders(self, slab_ids: list[int]) -> None:
        if not slab_ids:
            return
        u(
            self.conn,
            f"DELETE FROM slab_inventory WHERE parent_id IN ({placeholders(len(slab_ids))}) AND sale_id IS NULL",
            [int(i) for i in slab_ids],
        )

    def _clear_slabs(self) -> None:
        u(
            self.conn,
            """
            UPDATE slab_inventory
            SET sale_id = NULL, room_uuid = NULL, room = NULL, edge = NULL, seam = NULL,
                backsplash = NULL, tear_out = NULL, square_feet = NULL, stove = NULL,
                ten_year_sealer = NULL, waterfall = NULL, corbels = NULL, price = NULL, extras = NULL
            WHERE sale_id = ?
            """,
            (int(self.sale_id),),
        )
