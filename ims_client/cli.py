"""
Command line front-end for the IMS record store.

  ims register EMAIL [--password P]
  ims login EMAIL [--password P]
  ims logout
  ims inventory list [--order FIELD] [--desc]
  ims inventory add NAME QUANTITY PRICE COST [--supplier-id N]
  ims inventory update ID [--name N] [--quantity Q] [--price P] [--cost C] [--supplier-id S]
  ims inventory adjust ID DELTA
  ims inventory delete ID
  ims sales list
  ims sales record PRODUCT_ID QUANTITY [--atomic]

The access token is kept in IMS_SESSION_FILE between invocations.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .auth import AuthClient, clear_session, load_session, save_session
from .config import settings
from .errors import IMSError, PartialFailureError, ValidationError
from .inventory import InventoryView
from .sales import SalesWorkflow
from .store import RecordStoreClient

EXIT_ERROR = 1
EXIT_VALIDATION = 2
EXIT_PARTIAL = 3


@dataclass
class App:
    store: RecordStoreClient
    auth: AuthClient
    inventory: InventoryView
    sales: SalesWorkflow
    session_file: Path
    atomic_sales: bool = False


def build_app(
    base_url: Optional[str] = None,
    http_session: Any = None,
    session_file: Optional[Path] = None,
    atomic_sales: Optional[bool] = None,
) -> App:
    store = RecordStoreClient(base_url=base_url or settings.api_url, timeout=settings.request_timeout)
    if http_session is not None:
        store.session = http_session
    session_file = Path(session_file or settings.session_file)
    store.token = load_session(session_file)

    inventory = InventoryView(store)
    return App(
        store=store,
        auth=AuthClient(store),
        inventory=inventory,
        sales=SalesWorkflow(store, inventory),
        session_file=session_file,
        atomic_sales=settings.atomic_sales if atomic_sales is None else atomic_sales,
    )


def _print_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    cells = [[str(h) for h in headers]] + [["" if c is None else str(c) for c in row] for row in rows]
    widths = [max(len(row[i]) for row in cells) for i in range(len(headers))]
    for n, row in enumerate(cells):
        print("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
        if n == 0:
            print("  ".join("-" * w for w in widths))


def _password(args: argparse.Namespace) -> str:
    return args.password if args.password is not None else getpass.getpass("Password: ")


# ----------------------------
# Account
# ----------------------------

def cmd_register(app: App, args: argparse.Namespace) -> int:
    session = app.auth.sign_up(args.email, _password(args))
    save_session(app.session_file, session)
    print(f"Registration successful. Signed in as {session.user.get('email')}.")
    return 0


def cmd_login(app: App, args: argparse.Namespace) -> int:
    session = app.auth.sign_in(args.email, _password(args))
    save_session(app.session_file, session)
    print(f"Signed in as {session.user.get('email')}.")
    return 0


def cmd_logout(app: App, args: argparse.Namespace) -> int:
    try:
        app.auth.sign_out()
    finally:
        clear_session(app.session_file)
    print("Signed out.")
    return 0


# ----------------------------
# Inventory
# ----------------------------

def cmd_inventory_list(app: App, args: argparse.Namespace) -> int:
    items = app.inventory.refresh(order_by=args.order, ascending=not args.desc)
    _print_table(
        ["ID", "Product", "Quantity", "Price", "Cost", "Supplier ID"],
        [
            [
                i.id,
                i.product_name,
                i.quantity,
                f"${i.price:.2f}",
                f"${i.cost:.2f}" if i.cost is not None else None,
                i.supplier_id,
            ]
            for i in items
        ],
    )
    return 0


def cmd_inventory_add(app: App, args: argparse.Namespace) -> int:
    item = app.inventory.add_item(args.name, args.quantity, args.price, args.cost, args.supplier_id)
    print(f"Added item {item.id}: {item.product_name} (quantity {item.quantity}).")
    return 0


def cmd_inventory_update(app: App, args: argparse.Namespace) -> int:
    item = app.inventory.update_item(
        args.id,
        product_name=args.name,
        quantity=args.quantity,
        price=args.price,
        cost=args.cost,
        supplier_id=args.supplier_id,
    )
    print(f"Updated item {item.id}: {item.product_name} (quantity {item.quantity}).")
    return 0


def cmd_inventory_adjust(app: App, args: argparse.Namespace) -> int:
    item = app.inventory.adjust_item(args.id, args.delta)
    print(f"Item {item.id} ({item.product_name}) now has quantity {item.quantity}.")
    return 0


def cmd_inventory_delete(app: App, args: argparse.Namespace) -> int:
    app.inventory.delete_item(args.id)
    print(f"Deleted item {args.id}.")
    return 0


# ----------------------------
# Sales
# ----------------------------

def cmd_sales_list(app: App, args: argparse.Namespace) -> int:
    app.inventory.refresh()
    app.sales.refresh_sales()
    _print_table(
        ["ID", "Product", "Quantity", "Price", "Total", "Date"],
        [
            [
                r["id"],
                r["product_name"],
                r["quantity"],
                f"${r['price']:.2f}",
                f"${r['total']:.2f}",
                r["sale_date"].date().isoformat(),
            ]
            for r in app.sales.rows()
        ],
    )
    return 0


def cmd_sales_record(app: App, args: argparse.Namespace) -> int:
    app.inventory.refresh()
    if args.atomic or app.atomic_sales:
        sale = app.sales.record_sale_atomic(args.product_id, args.quantity)
    else:
        sale = app.sales.record_sale(args.product_id, args.quantity)

    item = app.inventory.find(sale.product_id)
    name = item.product_name if item else f"product {sale.product_id}"
    print(f"Recorded sale {sale.id}: {sale.quantity} x {name} at ${sale.price:.2f} (total ${sale.total:.2f}).")
    if item is not None and not app.inventory.stale:
        print(f"Remaining stock: {item.quantity}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ims", description="Inventory and sales management")
    commands = parser.add_subparsers(dest="command", required=True)

    p = commands.add_parser("register", help="create an account and sign in")
    p.add_argument("email")
    p.add_argument("--password")
    p.set_defaults(handler=cmd_register)

    p = commands.add_parser("login", help="sign in")
    p.add_argument("email")
    p.add_argument("--password")
    p.set_defaults(handler=cmd_login)

    p = commands.add_parser("logout", help="sign out")
    p.set_defaults(handler=cmd_logout)

    inventory = commands.add_parser("inventory", help="inventory items").add_subparsers(
        dest="inventory_command", required=True
    )
    p = inventory.add_parser("list")
    p.add_argument("--order", default="id", help="column to sort by (default: id)")
    p.add_argument("--desc", action="store_true")
    p.set_defaults(handler=cmd_inventory_list)

    p = inventory.add_parser("add")
    p.add_argument("name")
    p.add_argument("quantity")
    p.add_argument("price")
    p.add_argument("cost")
    p.add_argument("--supplier-id", dest="supplier_id")
    p.set_defaults(handler=cmd_inventory_add)

    p = inventory.add_parser("update")
    p.add_argument("id", type=int)
    p.add_argument("--name")
    p.add_argument("--quantity")
    p.add_argument("--price")
    p.add_argument("--cost")
    p.add_argument("--supplier-id", dest="supplier_id")
    p.set_defaults(handler=cmd_inventory_update)

    p = inventory.add_parser("adjust", help="change stock by a signed amount")
    p.add_argument("id", type=int)
    p.add_argument("delta")
    p.set_defaults(handler=cmd_inventory_adjust)

    p = inventory.add_parser("delete")
    p.add_argument("id", type=int)
    p.set_defaults(handler=cmd_inventory_delete)

    sales = commands.add_parser("sales", help="sales").add_subparsers(dest="sales_command", required=True)
    p = sales.add_parser("list")
    p.set_defaults(handler=cmd_sales_list)

    p = sales.add_parser("record")
    p.add_argument("product_id")
    p.add_argument("quantity")
    p.add_argument("--atomic", action="store_true", help="use the transactional sale procedure")
    p.set_defaults(handler=cmd_sales_record)

    return parser


def main(argv: Optional[List[str]] = None, app: Optional[App] = None) -> int:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    args = build_parser().parse_args(argv)
    app = app or build_app()

    try:
        return args.handler(app, args)
    except PartialFailureError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        print(
            f"Sale {e.sale.id} is recorded; product {e.product_id} still needs its stock reduced by {e.quantity} "
            f"(ims inventory adjust {e.product_id} -{e.quantity}).",
            file=sys.stderr,
        )
        return EXIT_PARTIAL
    except ValidationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_VALIDATION
    except IMSError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
