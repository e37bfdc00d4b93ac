from __future__ import annotations

import logging
import random

from fabshop.db import ensure_schema, q, q1, transaction, u, x
from fabshop.forms import CustomerForm, RoomForm, SlabOption, FixtureOption
from fabshop.services.contracts import Contract
from fabshop.services.users import get_user
from fabshop.utils import iso_now

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = "Granite Depot"
DEFAULT_EMPLOYEES = [("Alex Rivera", "alex@granitedepot.test", 1), ("Sam Carter", "sam@granitedepot.test", 0)]
DEFAULT_STONES = [
    ("Absolute Black", "Granite", 45.0),
    ("Calacatta Gold", "Quartz", 72.0),
    ("Taj Mahal", "Quartzite", 85.0),
    ("Carrara White", "Marble", 60.0),
]
DEFAULT_SINK_TYPES = [("Undermount 50/50", "stainless", 250.0), ("Farmhouse 33in", "ceramic", 480.0)]
DEFAULT_FAUCET_TYPES = [("Pull-down Chrome", "kitchen", 180.0), ("Widespread Brushed Nickel", "bath", 140.0)]
DEFAULT_CUSTOMERS = [
    ("Jordan Lee", "317-555-0101", "jordan@example.com", "1200 Meridian St, Indianapolis, IN", "46204", None),
    ("Pat Morgan", "317-555-0144", "pat@example.com", "88 Monument Cir, Indianapolis, IN", "46204", None),
    ("Riley Homes", "317-555-0199", "office@rileyhomes.test", "500 Builder Way, Carmel, IN", "46032", "Riley Homes LLC"),
]

TABLES = ["faucets", "sinks", "slab_inventory", "sales", "faucet_type", "sink_type", "stones", "customers", "users", "company"]


def upsert_reference_data(conn) -> int:
    """Creates the default company and its catalog once. Returns the company id."""
    ensure_schema(conn)

    row = q1(conn, "SELECT id FROM company WHERE name=?", (DEFAULT_COMPANY,))
    if row:
        return int(row["id"])

    company_id = x(conn, "INSERT INTO company (name, created_date) VALUES (?, ?)", (DEFAULT_COMPANY, iso_now()))
    for name, email, is_admin in DEFAULT_EMPLOYEES:
        x(
            conn,
            "INSERT INTO users (company_id, name, email, is_employee, is_admin, created_date) VALUES (?, ?, ?, 1, ?, ?)",
            (company_id, name, email, int(is_admin), iso_now()),
        )
    for name, kind, price in DEFAULT_STONES:
        x(
            conn,
            "INSERT INTO stones (company_id, name, type, retail_price, created_date) VALUES (?, ?, ?, ?, ?)",
            (company_id, name, kind, price, iso_now()),
        )
    for name, kind, price in DEFAULT_SINK_TYPES:
        x(conn, "INSERT INTO sink_type (company_id, name, type, retail_price) VALUES (?, ?, ?, ?)", (company_id, name, kind, price))
    for name, kind, price in DEFAULT_FAUCET_TYPES:
        x(conn, "INSERT INTO faucet_type (company_id, name, type, retail_price) VALUES (?, ?, ?, ?)", (company_id, name, kind, price))
    for name, phone, email, address, zip_code, company_name in DEFAULT_CUSTOMERS:
        x(
            conn,
            """
            INSERT INTO customers (company_id, name, phone, email, address, postal_code, company_name, created_date)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (company_id, name, phone, email, address, zip_code, company_name, iso_now()),
        )

    logger.info("Reference data created for company %s", company_id)
    return int(company_id)


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    with transaction(conn):
        u(conn, "UPDATE slab_inventory SET parent_id = NULL, sale_id = NULL;")
        u(conn, "UPDATE sinks SET slab_id = NULL;")
        u(conn, "UPDATE faucets SET slab_id = NULL;")
        for t in TABLES:
            u(conn, f"DELETE FROM {t};")
    logger.warning("All data wiped")


def load_demo_data(conn, *, seed: int = 7) -> None:
    random.seed(seed)
    company_id = upsert_reference_data(conn)

    stones = q(conn, "SELECT * FROM stones WHERE company_id=? ORDER BY id", (company_id,))
    for st in stones:
        for _ in range(random.randint(2, 4)):
            bundle = f"{str(st['name'])[:3].upper()}-{random.randint(100, 999)}"
            for _ in range(random.randint(1, 3)):
                x(
                    conn,
                    "INSERT INTO slab_inventory (stone_id, bundle, length, width, created_at) VALUES (?, ?, ?, ?, ?)",
                    (int(st["id"]), bundle, float(random.choice([120, 126, 130])), float(random.choice([63, 65, 76])), iso_now()),
                )

    for table, type_table, type_col in (("sinks", "sink_type", "sink_type_id"), ("faucets", "faucet_type", "faucet_type_id")):
        for t in q(conn, f"SELECT id FROM {type_table} WHERE company_id=?", (company_id,)):
            for _ in range(random.randint(3, 6)):
                x(conn, f"INSERT INTO {table} ({type_col}) VALUES (?)", (int(t["id"]),))

    # Two demo sales: one full slab with fixtures, one partial slab.
    seller = q1(conn, "SELECT id FROM users WHERE company_id=? ORDER BY id", (company_id,))
    user = get_user(conn, int(seller["id"]))
    customers = q(conn, "SELECT id, name FROM customers WHERE company_id=? ORDER BY id", (company_id,))
    sink_type = q1(conn, "SELECT id FROM sink_type WHERE company_id=? ORDER BY id", (company_id,))
    faucet_type = q1(conn, "SELECT id FROM faucet_type WHERE company_id=? ORDER BY id", (company_id,))

    for i, customer in enumerate(customers[:2]):
        slab = q1(
            conn,
            """
            SELECT si.id, st.retail_price FROM slab_inventory si
            JOIN stones st ON st.id = si.stone_id
            WHERE st.company_id=? AND si.sale_id IS NULL AND si.parent_id IS NULL
            ORDER BY si.id
            """,
            (company_id,),
        )
        if slab is None:
            break
        room = RoomForm(
            room="kitchen" if i == 0 else "bathroom",
            square_feet=float(random.randint(25, 60)),
            retail_price=float(slab["retail_price"]),
            slabs=[SlabOption(id=int(slab["id"]), is_full=(i == 0))],
            sink_type=[FixtureOption(type_id=int(sink_type["id"]))] if i == 0 else [],
            faucet_type=[FixtureOption(type_id=int(faucet_type["id"]))] if i == 0 else [],
        )
        form = CustomerForm(name=str(customer["name"]), customer_id=int(customer["id"]), rooms=[room])
        Contract(conn, form).sell(user)

    logger.info("Demo data loaded (seed=%s)", seed)
