# Overview: Flask CLI commands for setup, staff accounts, stock and purchases.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import ROLES
from .services import purchase_service, stock_service
from .services.auth_service import create_user, PasswordValidationError
from .services.purchase_service import PurchaseValidationError, PurchaseDeniedError
from .services.stock_service import StockAdjustmentError
from .validation import ValidationError
from .time_utils import format_countdown, to_utc_z


DEFAULT_PASSWORD = "Password123!"

DEFAULT_USERS = [
    ("admin", "admin@teapot.local", "admin"),
    ("inventory", "inventory@teapot.local", "inventory"),
    ("customer", "customer@teapot.local", "customer"),
]


def _print_eligibility(result) -> None:
    click.echo(f"Customer {result.customer_id:04d}: {result.status.upper()}")
    click.echo(f"     Bought in last 24h: {result.total_bought}")
    click.echo(f"     Remaining: {result.remaining}")
    if result.next_eligible_at is not None:
        click.echo(
            f"     Next eligible: {to_utc_z(result.next_eligible_at)} "
            f"(in {format_countdown(result.seconds_until_eligible)})"
        )
    for tx in result.transactions:
        click.echo(f"     {to_utc_z(tx.created_at)}  {abs(tx.quantity)} unit(s)")


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """System initialization and database commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the database with the inventory account and default users.

    Idempotent: existing rows are left alone.
    """
    click.echo("START Initializing Little Tea Pot...")

    db.create_all()
    click.echo("PASS Database tables ready")

    account = stock_service.ensure_inventory_account()
    db.session.commit()
    click.echo(f"PASS Inventory account: {account.name} (ID: {account.id})")

    click.echo("\nUSERS Creating default users...")
    for username, email, role in DEFAULT_USERS:
        if db.session.query(User).filter_by(username=username).first():
            click.echo(f"WARN  User '{username}' already exists, skipping...")
            continue
        try:
            create_user(username, email, DEFAULT_PASSWORD, role=role)
        except (PasswordValidationError, ValueError) as e:
            click.echo(f"FAIL Failed to create user '{username}': {e}")
            continue
        click.echo(f"PASS Created user: {username} ({email}) with role '{role}'")

    click.echo("\nDONE Little Tea Pot initialized")
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for username, email, _ in DEFAULT_USERS:
        click.echo(f"   {username:<10}-> {email:<24}/ {DEFAULT_PASSWORD}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'flask system init' to initialize.")


# =============================================================================
# USER COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """Staff account commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.username).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 80)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Active':<8} {'Role'}")
    click.echo("=" * 80)
    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<30} {active_str:<8} {user.role}")
    click.echo("=" * 80 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), default='customer', show_default=True, help='Role')
@with_appcontext
def create_user_cli(username, email, password, role):
    """
    Create a new staff user.

    Password must meet strength requirements:
    8+ chars with uppercase, lowercase, digit and special char.
    """
    try:
        user = create_user(username, email, password, role=role)
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        raise SystemExit(1)
    except ValueError as e:
        click.echo(f"FAIL Failed to create user: {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


# =============================================================================
# STOCK COMMANDS
# =============================================================================

@click.group('stock')
def stock_group():
    """Inventory stock commands."""


@stock_group.command('show')
@with_appcontext
def show_stock():
    """Print current stock and the recent change log."""
    summary = stock_service.get_inventory_summary()

    click.echo(f"Current stock: {summary['current_stock']}")
    if summary["low_stock"]:
        click.echo(f"WARN  Low stock (below {summary['low_stock_threshold']})")

    if not summary["recent"]:
        click.echo("No stock changes recorded.")
        return

    click.echo("\nRecent changes:")
    for row in summary["recent"]:
        click.echo(f"   {row['created_at']}  {row['quantity']:+d}  by {row['created_by']}")


@stock_group.command('adjust')
@click.argument('direction', type=click.Choice(stock_service.DIRECTIONS))
@click.argument('amount')
@click.option('--user', 'username', default=None, help='Staff username to attribute the change to')
@with_appcontext
def adjust_stock_cli(direction, amount, username):
    """Increase or decrease stock by AMOUNT units."""
    try:
        tx = stock_service.adjust_stock(direction, amount, created_by=username)
    except (ValidationError, StockAdjustmentError) as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS Stock {direction}d by {abs(tx.quantity)}")
    click.echo(f"Current stock: {stock_service.get_current_stock()}")


# =============================================================================
# PURCHASE COMMANDS
# =============================================================================

@click.group('purchases')
def purchases_group():
    """Customer purchase limit commands."""


@purchases_group.command('check')
@click.argument('customer_id')
@with_appcontext
def check_purchase(customer_id):
    """Show whether CUSTOMER_ID may buy now and how many units are left."""
    try:
        result = purchase_service.check_eligibility(customer_id)
    except PurchaseValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    if result.is_new_customer:
        click.echo(f"New customer! They can purchase up to {purchase_service.PURCHASE_LIMIT} items.")
    _print_eligibility(result)


@purchases_group.command('buy')
@click.argument('customer_id')
@click.argument('quantity')
@click.option('--user', 'username', default=None, help='Staff username recording the purchase')
@with_appcontext
def buy(customer_id, quantity, username):
    """Record a purchase of QUANTITY units for CUSTOMER_ID."""
    try:
        result = purchase_service.make_purchase(customer_id, quantity, created_by=username)
    except PurchaseValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    except PurchaseDeniedError as e:
        click.echo(f"FAIL {e}")
        _print_eligibility(e.eligibility)
        raise SystemExit(1)

    click.echo(f"PASS Successfully purchased {quantity} item(s)!")
    _print_eligibility(result)


@purchases_group.command('watch')
@click.argument('customer_id')
@with_appcontext
def watch(customer_id):
    """Live countdown until CUSTOMER_ID may buy again."""
    try:
        result = purchase_service.wait_until_eligible(
            customer_id,
            on_tick=lambda seconds: click.echo(f"\rNext eligible in {format_countdown(seconds)}", nl=False),
        )
    except PurchaseValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo("")
    click.echo("PASS Customer can now purchase again!")
    click.echo(f"     Remaining: {result.remaining}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(stock_group)
    app.cli.add_command(purchases_group)
