import pytest

from fabshop.forms import RoomForm
from fabshop.services.pricing import contract_price, extra_amount, room_price, type_prices


@pytest.mark.parametrize(
    "extra, expected",
    [
        (0, 0.0),
        (None, 0.0),
        (125, 125.0),
        (12.5, 12.5),
        ("80", 80.0),
        ({"type": "ogee", "price": 120}, 120.0),
        ({"type": "none"}, 0.0),
    ],
)
def test_extra_amount(extra, expected) -> None:
    assert extra_amount(extra) == expected


@pytest.mark.parametrize("extra", [True, [1, 2]])
def test_extra_amount_rejects_other_types(extra) -> None:
    with pytest.raises(ValueError, match="Invalid extra type"):
        extra_amount(extra)


def test_room_price() -> None:
    room = RoomForm(
        square_feet=30,
        retail_price=55.5,
        extras={"edge_price": {"type": "bevel", "price": 90}, "stove_price": 35},
        slabs=[{"id": 1}],
        sink_type=[{"id": 7}, {"id": 7}],
        faucet_type=[{"id": 9}],
    )
    # 30 * 55.5 + 90 + 35 + 2 * 250 + 140
    assert room_price(room, {7: 250.0}, {9: 140.0}) == 2430.0


def test_room_price_unknown_fixture_costs_nothing() -> None:
    room = RoomForm(square_feet=10, retail_price=10, slabs=[{"id": 1}], sink_type=[{"id": 3}])
    assert room_price(room, {}, {}) == 100.0


def test_type_prices(conn, shop) -> None:
    assert type_prices(conn, "sink_type", []) == {}
    assert type_prices(conn, "sink_type", [shop.sink_type_id, shop.sink_type_id]) == {shop.sink_type_id: 500.0}


def test_contract_price(conn, shop, make_form, make_room) -> None:
    kitchen = make_room(sink_type=[{"id": shop.sink_type_id}], faucet_type=[{"id": shop.faucet_type_id}])
    bath = make_room(room="bathroom", room_id="b1", square_feet=10, extras={"seam_price": 45})
    form = make_form(rooms=[kitchen, bath])
    # kitchen 25 * 60 + 500 + 200, bath 10 * 60 + 45
    assert contract_price(conn, form) == 2845.0
