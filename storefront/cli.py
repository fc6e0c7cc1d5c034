# storefront/cli.py
import click
from flask.cli import with_appcontext

from .extensions import db
from .model import Coupon, Product, User
from .services import settings_service

DEMO_PRODUCTS = [
    {
        "name": "Notebook Asus TUF Gaming F15",
        "description": "Intel Core i5-11400H / 8GB / 512GB SSD / RTX 3050",
        "price": 24990, "discount_percent": 10, "category": "Notebook",
        "stock": 50, "shipping_cost": 150,
    },
    {
        "name": 'Monitor 24" LG 24MP400-B',
        "description": "IPS / 75Hz / 5ms / HDMI / FreeSync",
        "price": 3500, "discount_percent": 0, "category": "Monitor",
        "stock": 20, "shipping_cost": 100,
    },
    {
        "name": "CPU Intel Core i5-13500",
        "description": "LGA 1700 / 14 Cores / 20 Threads",
        "price": 9490, "discount_percent": 5, "category": "CPU",
        "stock": 15, "shipping_cost": 50,
    },
    {
        "name": "VGA GALAX GeForce RTX 4060",
        "description": "8GB GDDR6 / 1-Click OC 2X",
        "price": 10900, "discount_percent": 2, "category": "VGA",
        "stock": 10, "shipping_cost": 80,
    },
    {
        "name": "RAM DDR5(5200) 16GB Kingston Fury Beast",
        "description": "16GB / 5200MHz / CL40",
        "price": 2190, "discount_percent": 0, "category": "RAM",
        "stock": 100, "shipping_cost": 40,
    },
    {
        "name": "SSD M.2 PCIe 500GB WD Blue SN570",
        "description": "NVMe / Read 3500MB/s / Write 2300MB/s",
        "price": 1390, "discount_percent": 15, "category": "SSD",
        "stock": 45, "shipping_cost": 40,
    },
]

DEMO_COUPONS = [
    {"code": "WELCOME100", "ctype": "fixed", "value": 100},
    {"code": "SALE5", "ctype": "percent", "value": 5},
    {"code": "FREESHIP", "ctype": "free_shipping", "value": 0},
]


@click.command("create-admin")
@with_appcontext
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
def create_admin(email, password, name):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists")
        return
    u = User(email=email, name=name, role="admin")
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    click.echo(f"Admin created: {u.id} {u.email}")


@click.command("seed-demo")
@with_appcontext
def seed_demo():
    """Insert the demo catalog and coupons; rows that already exist are skipped."""
    added = 0
    for data in DEMO_PRODUCTS:
        if Product.query.filter_by(name=data["name"]).first():
            continue
        db.session.add(Product(**data))
        added += 1
    for data in DEMO_COUPONS:
        if Coupon.query.filter_by(code=data["code"]).first():
            continue
        db.session.add(Coupon(**data, active=True))
        added += 1
    db.session.commit()
    click.echo(f"Seeded {added} rows")


@click.command("set-tax-rate")
@with_appcontext
@click.argument("rate")
def set_tax_rate(rate):
    try:
        value = settings_service.set_tax_rate(rate)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="RATE")
    click.echo(f"Tax rate set to {value}%")


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(seed_demo)
    app.cli.add_command(set_tax_rate)
