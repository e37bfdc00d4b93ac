from __future__ import annotations

import logging

from fabshop.db import q, q1, x
from fabshop.errors import CustomerNotFound
from fabshop.forms import CustomerForm
from fabshop.services.users import User
from fabshop.utils import iso_now

logger = logging.getLogger(__name__)

# form field -> customers column, filled only when the stored value is empty
_FILLABLE = (("billing_address", "address"), ("phone", "phone"), ("email", "email"))


def _clean(v):
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def get_customer(conn, customer_id: int, company_id: int):
    return q1(
        conn,
        "SELECT * FROM customers WHERE id=? AND company_id=?",
        (int(customer_id), int(company_id)),
    )


def list_customers(conn, company_id: int):
    return q(
        conn,
        "SELECT id, name, company_name, phone, email, address FROM customers WHERE company_id=? ORDER BY name",
        (int(company_id),),
    )


def create_customer(conn, *, company_id: int, form: CustomerForm) -> int:
    customer_id = x(
        conn,
        """
        INSERT INTO customers (name, company_id, phone, email, address, postal_code, created_date)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            form.name,
            int(company_id),
            _clean(form.phone),
            _clean(form.email),
            _clean(form.billing_address),
            _clean(form.billing_zip_code),
            iso_now(),
        ),
    )
    logger.info("Created customer %s for company %s", customer_id, company_id)
    return int(customer_id)


def resolve_customer(conn, form: CustomerForm, user: User) -> int:
    """
    Returns the customer id for a contract form, creating the customer when the
    form does not reference one.

    An existing customer must belong to the user's company. Empty contact
    fields on it are filled from the form, and the form's addresses are
    completed from the stored record (mutates `form`).
    """
    if form.customer_id is None:
        return create_customer(conn, company_id=user.company_id, form=form)

    row = get_customer(conn, form.customer_id, user.company_id)
    if row is None:
        raise CustomerNotFound()

    sets, values = [], []
    for field, column in _FILLABLE:
        new = _clean(getattr(form, field))
        if new and not _clean(row[column]):
            sets.append(f"{column} = ?")
            values.append(new)
    if sets:
        x(
            conn,
            f"UPDATE customers SET {', '.join(sets)} WHERE id = ? AND company_id = ?",
            (*values, int(row["id"]), int(user.company_id)),
        )

    if not _clean(form.billing_address) and _clean(row["address"]):
        form.billing_address = str(row["address"])
    if form.same_address and _clean(form.billing_address):
        form.project_address = form.billing_address

    return int(row["id"])


def set_company_name(conn, customer_id: int, company_id: int, company_name) -> None:
    x(
        conn,
        "UPDATE customers SET company_name = ? WHERE id = ? AND company_id = ?",
        (_clean(company_name), int(customer_id), int(company_id)),
    )


def customer_address(conn, customer_id: int, company_id: int) -> str:
    row = get_customer(conn, customer_id, company_id)
    return str(row["address"] or "") if row else ""
