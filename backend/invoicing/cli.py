# Overview: Flask CLI command groups for database bootstrap, sample data, and invoice operations.

# backend/invoicing/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app invoicing <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app invoicing system init-db
#   Create all tables (no-op for tables that already exist).
# - python -m flask --app invoicing system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask --app invoicing system seed
#   Replace all data with sample invoices and payments.
#
# Invoice operations:
# - python -m flask --app invoicing invoices create --total 200.00
#   Create an invoice (totals under 10000 are dollars, otherwise cents).
# - python -m flask --app invoicing invoices list
#   List invoices with balance and paid status.
# - python -m flask --app invoicing invoices show 1
#   Show one invoice and its payments.
# - python -m flask --app invoicing invoices pay 1 --amount 50.00 --method cash
#   Record a payment (cash, check, or charge).
# - python -m flask --app invoicing invoices delete 1 --yes
#   Delete an invoice and all of its payments.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Invoice, Payment
from .currency import format_dollars
from .services import invoice_service
from .services.invoice_service import InvoiceError
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Database tables created.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask --app invoicing system seed' for sample data.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Replace all invoices and payments with sample data."""
    click.echo("START Seeding database...")

    db.create_all()
    db.session.query(Payment).delete()
    db.session.query(Invoice).delete()
    db.session.commit()

    invoice1 = invoice_service.create_invoice(500.00)
    invoice_service.record_payment(invoice1, 250.00, "cash")
    invoice_service.record_payment(invoice1, 250.00, "charge")
    click.echo(f"PASS Created fully paid invoice #{invoice1.id} for $500.00")

    invoice2 = invoice_service.create_invoice(1000.00)
    invoice_service.record_payment(invoice2, 600.00, "check")
    click.echo(
        f"PASS Created partially paid invoice #{invoice2.id} for $1000.00 "
        f"(owes ${invoice_service.amount_owed(invoice2):.2f})"
    )

    invoice3 = invoice_service.create_invoice(150.00)
    click.echo(f"PASS Created unpaid invoice #{invoice3.id} for $150.00")

    invoice4 = invoice_service.create_invoice(750.00)
    for method in ("cash", "check", "charge"):
        invoice_service.record_payment(invoice4, 250.00, method)
    click.echo(f"PASS Created fully paid invoice #{invoice4.id} with multiple payments")

    _echo_summary(invoice_service.status_counts())
    click.echo("DONE Seeding complete!")


def _echo_summary(counts: dict) -> None:
    click.echo("")
    click.echo("Summary:")
    click.echo(f"  Total Invoices: {counts['invoices']}")
    click.echo(f"  Total Payments: {counts['payments']}")
    click.echo(f"  Fully Paid: {counts['fully_paid']}")
    click.echo(f"  Partially Paid: {counts['partially_paid']}")
    click.echo(f"  Unpaid: {counts['unpaid']}")
    click.echo("")


@click.group('invoices')
def invoices_group():
    """Invoice and payment commands."""


@invoices_group.command('create')
@click.option('--total', required=True, help='Total in dollars (or cents when >= 10000)')
@with_appcontext
def create_invoice_cmd(total):
    """Create an invoice."""
    try:
        invoice = invoice_service.create_invoice(total)
    except ValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created invoice #{invoice.id} for {format_dollars(invoice.total)}")


@invoices_group.command('list')
@with_appcontext
def list_invoices_cmd():
    """List invoices with balance and paid status."""
    invoices = invoice_service.list_invoices()
    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"{'ID':<6} {'Total':>14} {'Owed':>14} {'Payments':>9}  Status")
    click.echo("-" * 60)
    for invoice in invoices:
        data = invoice.to_dict()
        status = "PAID" if data["fully_paid"] else "OPEN"
        click.echo(
            f"{invoice.id:<6} {format_dollars(invoice.total):>14} "
            f"{'$' + format(data['amount_owed'], ',.2f'):>14} {data['payment_count']:>9}  {status}"
        )


@invoices_group.command('show')
@click.argument('invoice_id', type=int)
@with_appcontext
def show_invoice_cmd(invoice_id):
    """Show one invoice and its payments."""
    try:
        invoice = invoice_service.get_invoice(invoice_id)
    except InvoiceError as e:
        raise click.ClickException(str(e))

    data = invoice.to_dict(include_payments=True)
    click.echo(f"Invoice #{invoice.id}")
    click.echo(f"  Total:      {format_dollars(invoice.total)}")
    click.echo(f"  Owed:       ${data['amount_owed']:,.2f}")
    click.echo(f"  Fully paid: {'yes' if data['fully_paid'] else 'no'}")
    click.echo(f"  Payments:   {data['payment_count']}")
    for payment in data["payments"]:
        click.echo(f"    #{payment['id']:<5} {payment['payment_method']:<7} ${payment['amount']:,.2f}")


@invoices_group.command('pay')
@click.argument('invoice_id', type=int)
@click.option('--amount', required=True, help='Amount in dollars')
@click.option('--method', required=True, help='cash, check, or charge')
@with_appcontext
def pay_invoice_cmd(invoice_id, amount, method):
    """Record a payment against an invoice."""
    try:
        invoice = invoice_service.get_invoice(invoice_id)
    except InvoiceError as e:
        raise click.ClickException(str(e))

    payment = invoice_service.record_payment(invoice, amount, method)
    if not payment:
        raise click.ClickException("; ".join(invoice.errors.full_messages()))

    click.echo(
        f"PASS Recorded {payment.payment_method} payment #{payment.id} of "
        f"{format_dollars(payment.amount)} (owed: ${invoice_service.amount_owed(invoice):,.2f})"
    )


@invoices_group.command('delete')
@click.argument('invoice_id', type=int)
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def delete_invoice_cmd(invoice_id, yes):
    """Delete an invoice and all of its payments."""
    if not yes:
        click.confirm(f"WARN This will DELETE invoice #{invoice_id} and its payments. Are you sure?", abort=True)
    try:
        invoice_service.delete_invoice(invoice_id)
    except InvoiceError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Deleted invoice #{invoice_id}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(invoices_group)
