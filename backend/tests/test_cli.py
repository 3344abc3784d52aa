"""Flask CLI command tests."""

from datetime import timedelta

from teapot.extensions import db
from teapot.models import Customer, Transaction, User


class TestSystemCommands:

    def test_init_creates_account_and_users(self, cli_runner):
        result = cli_runner.invoke(args=["system", "init"])

        assert result.exit_code == 0, result.output
        assert db.session.get(Customer, 1) is not None
        roles = {u.username: u.role for u in db.session.query(User).all()}
        assert roles == {"admin": "admin", "inventory": "inventory", "customer": "customer"}

    def test_init_is_idempotent(self, cli_runner):
        cli_runner.invoke(args=["system", "init"])
        result = cli_runner.invoke(args=["system", "init"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert db.session.query(User).count() == 3


class TestStockCommands:

    def test_adjust_and_show(self, cli_runner, inventory_account):
        result = cli_runner.invoke(args=["stock", "adjust", "increase", "7", "--user", "stock_clerk"])
        assert result.exit_code == 0, result.output
        assert "Current stock: 7" in result.output

        shown = cli_runner.invoke(args=["stock", "show"])
        assert "Current stock: 7" in shown.output
        assert "Low stock" in shown.output
        assert "stock_clerk" in shown.output

    def test_decrease_below_zero_fails(self, cli_runner, inventory_account):
        result = cli_runner.invoke(args=["stock", "adjust", "decrease", "1"])
        assert result.exit_code == 1
        assert "Cannot decrease stock below 0" in result.output
        assert db.session.query(Transaction).count() == 0


    def test_oversized_amount_fails_cleanly(self, cli_runner, inventory_account):
        result = cli_runner.invoke(args=["stock", "adjust", "increase", "99999999999999999999"])
        assert result.exit_code == 1
        assert "Please enter a valid number" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)


class TestPurchaseCommands:

    def test_check_new_customer(self, cli_runner):
        result = cli_runner.invoke(args=["purchases", "check", "1234"])
        assert result.exit_code == 0
        assert "New customer!" in result.output
        assert "Remaining: 5" in result.output

    def test_check_invalid_id(self, cli_runner):
        result = cli_runner.invoke(args=["purchases", "check", "0001"])
        assert result.exit_code == 1
        assert "reserved" in result.output

    def test_buy(self, cli_runner):
        result = cli_runner.invoke(args=["purchases", "buy", "1234", "2", "--user", "counter_staff"])

        assert result.exit_code == 0, result.output
        assert "Remaining: 3" in result.output
        assert db.session.query(Transaction).filter_by(created_by="counter_staff").count() == 1

    def test_buy_denied_shows_countdown(self, cli_runner, add_transaction):
        add_transaction(1234, -5, ago=timedelta(hours=1))

        result = cli_runner.invoke(args=["purchases", "buy", "1234", "1"])

        assert result.exit_code == 1
        assert "Purchase not allowed yet!" in result.output
        assert "Next eligible" in result.output

    def test_watch_eligible_customer(self, cli_runner):
        result = cli_runner.invoke(args=["purchases", "watch", "1234"])
        assert result.exit_code == 0
        assert "Customer can now purchase again!" in result.output


class TestUserCommands:

    def test_create_and_list(self, cli_runner):
        result = cli_runner.invoke(args=[
            "users", "create",
            "--username", "clerk2",
            "--email", "clerk2@teapot.test",
            "--password", "Sup3r$ecret",
            "--role", "inventory",
        ])
        assert result.exit_code == 0, result.output

        listed = cli_runner.invoke(args=["users", "list"])
        assert "clerk2" in listed.output
        assert "inventory" in listed.output

    def test_create_weak_password(self, cli_runner):
        result = cli_runner.invoke(args=[
            "users", "create",
            "--username", "weak",
            "--email", "weak@teapot.test",
            "--password", "weak",
        ])
        assert result.exit_code == 1
        assert "Password validation failed" in result.output
