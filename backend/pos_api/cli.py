# Overview: Flask CLI command groups for bootstrap and report inspection.

# backend/pos_api/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Insert the demo catalog (idempotent: skips names that already exist).
#
# Reports:
# - python -m flask reports today
# - python -m flask reports range 2026-01-01 2026-01-31

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Category, Product
from .services import reporting_service

DEMO_CATEGORIES = [
    ("Electronics", "Electronic devices and gadgets"),
    ("Food", "Packaged food and snacks"),
    ("Beverages", "Drinks"),
]

# (name, price, stock, category name)
DEMO_PRODUCTS = [
    ("iPhone 15 Pro", 15_000_000, 50, "Electronics"),
    ("USB-C Cable", 45_000, 200, "Electronics"),
    ("Indomie Goreng", 3_000, 500, "Food"),
    ("Mineral Water 600ml", 4_000, 300, "Beverages"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables ready: " + ", ".join(sorted(db.metadata.tables)))


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
    click.echo("BUILD  Recreating schema...")
    db.create_all()
    click.echo("PASS Database reset complete.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Insert the demo catalog."""
    categories = {}
    for name, description in DEMO_CATEGORIES:
        category = db.session.query(Category).filter_by(name=name).first()
        if category:
            click.echo(f"WARN  Category '{name}' already exists, skipping...")
        else:
            category = Category(name=name, description=description)
            db.session.add(category)
            db.session.flush()
            click.echo(f"PASS Created category: {name} (ID: {category.id})")
        categories[name] = category

    for name, price, stock, category_name in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(name=name).first():
            click.echo(f"WARN  Product '{name}' already exists, skipping...")
            continue
        product = Product(name=name, price=price, stock=stock, category_id=categories[category_name].id)
        db.session.add(product)
        db.session.flush()
        click.echo(f"PASS Created product: {name} (ID: {product.id}, price {price}, stock {stock})")

    db.session.commit()


@click.group('reports')
def reports_group():
    """Print sales reports as JSON."""


@reports_group.command('today')
@with_appcontext
def report_today():
    """Sales summary for the current UTC day."""
    click.echo(json.dumps(reporting_service.daily_report(), indent=2))


@reports_group.command('range')
@click.argument('start_date')
@click.argument('end_date')
@with_appcontext
def report_range(start_date, end_date):
    """Sales summary for START_DATE..END_DATE (YYYY-MM-DD, inclusive)."""
    try:
        report = reporting_service.range_report(start_date, end_date)
    except reporting_service.InvalidRange as exc:
        raise click.BadParameter(str(exc))
    click.echo(json.dumps(report, indent=2))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(reports_group)
