from decimal import Decimal

import pytest

from book_viewer.datafeed.multiplexer import Multiplexer
from book_viewer.errors import ParseError, ServiceConnectionError
from book_viewer.loadgen.orders import OrderGenerator
from book_viewer.types import OrderRequest, Side


def test_generated_orders_stay_in_range():
    gen = OrderGenerator(price_range=(1800, 2400), price_scale=100, quantity_range=(200, 600), seed=1)
    orders = [gen.next_order() for _ in range(10_000)]

    assert all(Decimal("18.00") <= o.price <= Decimal("24.00") for o in orders)
    assert all(200 <= o.quantity <= 600 for o in orders)
    assert {o.side for o in orders} == {Side.BUY, Side.SELL}
    assert all(isinstance(o.price, Decimal) for o in orders)


def test_range_bounds_are_inclusive():
    gen = OrderGenerator(price_range=(1, 2), price_scale=1, quantity_range=(5, 6), seed=3)
    orders = [gen.next_order() for _ in range(500)]

    assert {o.price for o in orders} == {Decimal(1), Decimal(2)}
    assert {o.quantity for o in orders} == {Decimal(5), Decimal(6)}


def test_price_is_scaled_exactly():
    gen = OrderGenerator(price_range=(40, 400), price_scale=4, seed=7)
    for order in (gen.next_order() for _ in range(1000)):
        assert Decimal(10) <= order.price <= Decimal(100)
        assert (order.price * 4) == (order.price * 4).to_integral_value()


def test_seed_makes_runs_reproducible():
    a = OrderGenerator(seed=42)
    b = OrderGenerator(seed=42)
    assert [a.next_order() for _ in range(100)] == [b.next_order() for _ in range(100)]


def test_iteration_is_unbounded():
    gen = OrderGenerator(seed=0)
    stream = iter(gen)
    assert all(isinstance(next(stream), OrderRequest) for _ in range(2000))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"price_range": (2400, 1800)},
        {"quantity_range": (600, 200)},
        {"price_scale": 0},
    ],
)
def test_invalid_configuration(kwargs):
    with pytest.raises(ValueError):
        OrderGenerator(**kwargs)


def test_order_payload():
    order = OrderRequest(side=Side.SELL, price=Decimal("20.25"), quantity=Decimal("300"))
    assert order.to_payload() == {"side": "Sell", "price": Decimal("20.25"), "quantity": Decimal("300")}


@pytest.mark.asyncio
async def test_run_submits_sequentially(mux, service):
    gen = OrderGenerator(seed=5)
    confirmations = []

    await gen.run(mux, "/orders", limit=5, on_confirmation=confirmations.append)

    assert len(service.orders) == 5
    assert gen.submitted == 5
    assert [c["id"] for c in confirmations] == [1, 2, 3, 4, 5]
    for sent in service.orders:
        assert sent["side"] in ("Buy", "Sell")
        assert isinstance(sent["price"], float)
        assert 18.0 <= sent["price"] <= 24.0


@pytest.mark.asyncio
async def test_submit_returns_body_as_is(mux):
    gen = OrderGenerator()
    bad = OrderRequest(side=Side.BUY, price=Decimal("-1"), quantity=Decimal("1"))
    assert await gen.submit(mux, bad, "/api/orders") == {"error": "invalid order"}


@pytest.mark.asyncio
async def test_run_stops_on_parse_error(mux, service):
    service.order_raw = b"not json"
    gen = OrderGenerator(seed=5)

    with pytest.raises(ParseError):
        await gen.run(mux, "/orders")
    assert gen.submitted == 0


@pytest.mark.asyncio
async def test_run_stops_on_connection_error():
    gen = OrderGenerator(seed=5)
    with pytest.raises(ServiceConnectionError):
        await gen.run(Multiplexer("http://127.0.0.1:9"), "/orders")
