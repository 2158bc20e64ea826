"""
Order book ladder TUI using Textual.

Displays:
- Top: last traded price
- Middle: 5 asks (red), spread / mid row, 5 bids (green)
- Bottom: order ticket (side, price, quantity)

Notes:
- The poller drives rendering; the app only stores the latest view and refreshes
- Rows are rebuilt from the view on every render, no widget tree churn
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, NamedTuple

from rich.console import RenderableType
from rich.table import Table
from rich.text import Text

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import Button, Footer, Input, Select, Static

from ..datafeed.decoder import decode_confirmation
from ..datafeed.poller import SnapshotPoller
from ..engine.money import DEFAULT_CURRENCY, DEFAULT_LOCALE, format_money, format_qty
from ..engine.view import DEFAULT_DEPTH, build_view
from ..errors import BookViewerError, SchemaError
from ..types import OrderRequest, Side

if TYPE_CHECKING:
    from ..config import Settings
    from ..datafeed.multiplexer import Multiplexer
    from ..types import OrderBookView, Snapshot

# Color scheme
BID_COLOR = "#62a862"      # Green
ASK_COLOR = "#f65555"      # Red
MID_COLOR = "#f8fafc"
HEADER_COLOR = "#94a3b8"


class LadderRow(NamedTuple):
    """One rendered ladder line."""
    left: str
    right: str
    color: str


def ladder_rows(
    view: OrderBookView,
    currency: str = DEFAULT_CURRENCY,
    locale: str = DEFAULT_LOCALE,
) -> list[LadderRow]:
    """Asks (farthest first), then spread | mid, then bids (best first)."""
    rows = [
        LadderRow(format_qty(level.quantity), format_money(level.price, currency, locale), ASK_COLOR)
        for level in view.asks
    ]
    rows.append(LadderRow(
        format_money(view.spread, currency, locale),
        format_money(view.mid, currency, locale),
        MID_COLOR,
    ))
    rows.extend(
        LadderRow(format_qty(level.quantity), format_money(level.price, currency, locale), BID_COLOR)
        for level in view.bids
    )
    return rows


class BookTable(Static):
    """Order book ladder widget."""

    DEFAULT_CSS = """
    BookTable {
        width: auto;
        height: auto;
    }
    """

    def __init__(self, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> None:
        super().__init__()
        self.currency = currency
        self.locale = locale
        self._view: OrderBookView | None = None

    def update_view(self, view: OrderBookView) -> None:
        self._view = view
        self.refresh()

    def render(self) -> RenderableType:
        if self._view is None:
            return Text("Waiting for data...", style="dim")

        table = Table(
            show_header=True,
            header_style=HEADER_COLOR,
            box=None,
            padding=(0, 1),
            collapse_padding=True,
        )
        table.add_column("Qty", justify="left", width=10)
        table.add_column("Price", justify="right", width=14)

        for row in ladder_rows(self._view, self.currency, self.locale):
            table.add_row(Text(row.left, style=row.color), Text(row.right, style=row.color))

        return table


class StatusBar(Static):
    """Last traded price."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 1;
        padding: 0 2;
        background: #0f172a;
    }
    """

    def __init__(self, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> None:
        super().__init__()
        self.currency = currency
        self.locale = locale
        self._view: OrderBookView | None = None

    def update_view(self, view: OrderBookView) -> None:
        self._view = view
        self.refresh()

    def render(self) -> RenderableType:
        if self._view is None:
            return Text("Connecting...", style="dim")

        result = Text()
        result.append("Last: ", style="dim")
        result.append(format_money(self._view.last, self.currency, self.locale), style="bold")
        return result


class OrderTicket(Horizontal):
    """Side / price / quantity inputs and a send button."""

    DEFAULT_CSS = """
    OrderTicket {
        height: auto;
        padding: 1 0;
    }
    OrderTicket Select {
        width: 14;
    }
    OrderTicket Input {
        width: 16;
    }
    """

    def compose(self) -> ComposeResult:
        yield Select(
            [(side.value, side.value) for side in Side],
            value=Side.BUY.value,
            allow_blank=False,
            id="side",
        )
        yield Input(placeholder="Price", id="price")
        yield Input(value="100", placeholder="Qty", id="qty")
        yield Button("Send Order", id="send")

    def read_order(self) -> OrderRequest:
        """Build an order from the inputs. Raises ValueError on bad input."""
        side = Side(self.query_one("#side", Select).value)
        try:
            price = Decimal(self.query_one("#price", Input).value)
            quantity = Decimal(self.query_one("#qty", Input).value)
        except InvalidOperation as exc:
            raise ValueError("price and quantity must be numbers") from exc
        return OrderRequest(side=side, price=price, quantity=quantity)

    def suggest_price(self, price: Decimal) -> None:
        """Prefill the price input once, leaving user input alone."""
        try:
            price_input = self.query_one("#price", Input)
        except NoMatches:
            return
        if not price_input.value:
            price_input.value = str(price)


class BookApp(App):
    """Main Book Viewer application."""

    CSS = """
    Screen {
        background: #0f172a;
    }

    #main-container {
        width: 100%;
        height: auto;
        padding: 1 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        mux: Multiplexer,
        orders_path: str = "/orders",
        depth: int = DEFAULT_DEPTH,
        currency: str = DEFAULT_CURRENCY,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        super().__init__()
        self.mux = mux
        self.orders_path = orders_path
        self.depth = depth
        self.currency = currency
        self.locale = locale
        self._status_bar: StatusBar | None = None
        self._book_table: BookTable | None = None
        self._ticket: OrderTicket | None = None

    def compose(self) -> ComposeResult:
        self._status_bar = StatusBar(self.currency, self.locale)
        self._book_table = BookTable(self.currency, self.locale)
        self._ticket = OrderTicket()

        yield self._status_bar
        yield Container(self._book_table, self._ticket, id="main-container")
        yield Footer()

    def show_snapshot(self, snapshot: Snapshot) -> None:
        """Poller callback: derive the view and refresh widgets."""
        view = build_view(snapshot, self.depth)

        if self._status_bar:
            self._status_bar.update_view(view)
        if self._book_table:
            self._book_table.update_view(view)
        if self._ticket and view.mid is not None:
            self._ticket.suggest_price(view.mid)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id != "send" or self._ticket is None:
            return
        try:
            order = self._ticket.read_order()
        except ValueError as exc:
            self.notify(str(exc), severity="error")
            return
        self.run_worker(self._submit(order))

    async def _submit(self, order: OrderRequest) -> None:
        try:
            body = await self.mux.post(self.orders_path, order.to_payload())
        except BookViewerError as exc:
            self.notify(f"Order failed: {exc}", severity="error")
            return

        try:
            confirmation = decode_confirmation(body)
        except SchemaError:
            # Rejections come back in whatever shape the service chose
            self.notify(f"Order rejected: {body}", severity="warning")
            return

        self.notify(
            f"Order #{confirmation.id} {confirmation.side.value} "
            f"{format_qty(confirmation.quantity)} @ "
            f"{format_money(confirmation.price, self.currency, self.locale)}: "
            f"{confirmation.status.value}"
        )


async def run_ui(mux: Multiplexer, settings: Settings) -> None:
    """Run the TUI with a poller scoped to the app's lifetime."""
    app = BookApp(
        mux,
        orders_path=settings.orders_path,
        depth=settings.depth,
        currency=settings.currency,
        locale=settings.locale,
    )
    poller = SnapshotPoller(
        mux,
        settings.snapshot_path,
        interval_ms=settings.poll_interval_ms,
        on_snapshot=app.show_snapshot,
    )
    async with poller:
        await app.run_async()
