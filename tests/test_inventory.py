from fabshop.services.contracts import Contract
from fabshop.services.inventory import (
    available_slabs,
    faucet_stock,
    list_sales,
    sale_slabs,
    sink_stock,
    stone_summary,
)


def test_available_slabs_excludes_sold_and_flags_remnants(conn, shop, make_form, make_room) -> None:
    spare = shop.add_slab(bundle="B")
    form = make_form(rooms=[make_room(slabs=[{"id": shop.slab_id, "is_full": False}])])
    Contract(conn, form).sell(shop.user)

    slabs = available_slabs(conn, shop.company_id)
    ids = [s["id"] for s in slabs]
    assert shop.slab_id not in ids
    assert spare in ids
    remnants = [s for s in slabs if s["is_remnant"]]
    assert len(remnants) == 1
    assert remnants[0]["stone"] == "Test Stone"
    assert remnants[0]["retail_price"] == 50.0


def test_available_slabs_by_stone_and_company(conn, shop, other_shop) -> None:
    shop.add_slab(bundle="B")
    assert len(available_slabs(conn, shop.company_id, stone_id=shop.stone_id)) == 2
    assert available_slabs(conn, shop.company_id, stone_id=other_shop.stone_id) == []
    assert [s["id"] for s in available_slabs(conn, other_shop.company_id)] == [other_shop.slab_id]


def test_stone_summary(conn, shop, make_form, make_room) -> None:
    shop.add_slab(bundle="B")
    form = make_form(rooms=[make_room(slabs=[{"id": shop.slab_id, "is_full": False}])])
    Contract(conn, form).sell(shop.user)

    row = dict(stone_summary(conn, shop.company_id)[0])
    assert row["stone"] == "Test Stone"
    assert row["full_slabs"] == 1
    assert row["remnants"] == 1
    assert row["sold"] == 1


def test_fixture_stock(conn, shop, make_form, make_room) -> None:
    shop.add_sink()
    room = make_room(sink_type=[{"id": shop.sink_type_id}], faucet_type=[{"id": shop.faucet_type_id}])
    Contract(conn, make_form(rooms=[room])).sell(shop.user)

    sinks = dict(sink_stock(conn, shop.company_id)[0])
    assert (sinks["available"], sinks["sold"]) == (1, 1)
    faucets = dict(faucet_stock(conn, shop.company_id)[0])
    assert (faucets["available"], faucets["sold"]) == (0, 1)


def test_list_sales_hides_cancelled(conn, shop, make_form, make_room) -> None:
    second = shop.add_slab(bundle="B")
    kept = Contract(conn, make_form()).sell(shop.user)
    cancelled = Contract(conn, make_form(rooms=[make_room(slabs=[{"id": second}])]))
    cancelled.sell(shop.user)
    cancelled.unsell(shop.user)

    open_sales = list_sales(conn, shop.company_id)
    assert [s["id"] for s in open_sales] == [kept]
    assert open_sales[0]["customer"] == "Test Customer"
    assert open_sales[0]["seller"] == "Test User"
    assert open_sales[0]["slabs"] == 1

    everything = list_sales(conn, shop.company_id, include_cancelled=True)
    assert [s["id"] for s in everything] == [cancelled.sale_id, kept]


def test_sale_slabs(conn, shop, make_form) -> None:
    sale_id = Contract(conn, make_form()).sell(shop.user)
    slabs = sale_slabs(conn, sale_id)
    assert [s["id"] for s in slabs] == [shop.slab_id]
    assert slabs[0]["room"] == "kitchen"
    assert slabs[0]["cut_date"] is None
