# Overview: Flask CLI command groups for bootstrap, seeding, and maintenance.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog seed
#   Insert the fabric categories, sample products and reviews (empty catalog only).
#
# Users:
# - python -m flask users create-admin --name "Store Admin" --email admin@store.ae
#   Create a back-office admin (prompts for password).
#
# Maintenance:
# - python -m flask sessions purge
#   Delete expired sessions.
# - python -m flask customers reconcile [--dry-run]
#   Recompute customer order counts and spend from order history.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Category, Review
from .money import to_cents
from .services import customer_service, products_service, session_service
from .services.auth_service import create_admin, DuplicateEmailError
from .validation import ValidationError


SEED_CATEGORIES = [
    {
        "key": "silk",
        "name": "Silk",
        "description": "Premium silk fabrics",
        "image_url": "https://images.unsplash.com/photo-1582582621959-48d27397dc69?auto=format&fit=crop&w=400&h=300",
    },
    {
        "key": "cotton",
        "name": "Cotton",
        "description": "Natural cotton blends",
        "image_url": "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?auto=format&fit=crop&w=400&h=300",
    },
    {
        "key": "wool",
        "name": "Wool",
        "description": "Cozy wool fabrics",
        "image_url": "https://images.unsplash.com/photo-1606107557195-0e29a4b5b4aa?auto=format&fit=crop&w=400&h=300",
    },
    {
        "key": "synthetic",
        "name": "Synthetic",
        "description": "Modern synthetic blends",
        "image_url": "https://images.unsplash.com/photo-1562157873-818bc0726f68?auto=format&fit=crop&w=400&h=300",
    },
]

SEED_PRODUCTS = [
    {
        "category": "silk",
        "name": "Premium Blue Silk",
        "description": "Luxurious blue silk fabric perfect for formal wear and special occasions. "
                       "Made from 100% natural silk with exceptional drape and sheen.",
        "price": "45.00",
        "stock": 156,
        "images": [
            "https://images.unsplash.com/photo-1571019613454-1cb2f99b2d8b?auto=format&fit=crop&w=800&h=800",
            "https://images.unsplash.com/photo-1582582621959-48d27397dc69?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Natural Silk",
            "width": "150cm",
            "weight": "120 GSM",
            "care": "Dry Clean Only",
        },
        "reviews": [
            ("Fatima Al-Zahra", 5, True,
             "Absolutely beautiful fabric! The quality is exceptional and the color is exactly as shown. "
             "Used it for my daughter's wedding dress and it was perfect."),
            ("Mohammed Hassan", 5, True,
             "Great quality silk. Bought this for tailoring traditional garments. "
             "The fabric handles very well and the finish is professional grade."),
        ],
    },
    {
        "category": "cotton",
        "name": "Organic Red Cotton",
        "description": "Premium organic cotton fabric in rich red color. Perfect for casual wear and home textiles.",
        "price": "32.00",
        "stock": 8,
        "images": [
            "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Organic Cotton",
            "width": "140cm",
            "weight": "200 GSM",
            "care": "Machine Wash Cold",
        },
        "reviews": [
            ("Sara Ahmed", 4, False,
             "Good quality organic cotton. The color is vibrant and the fabric feels nice. "
             "Would recommend for casual projects."),
        ],
    },
    {
        "category": "wool",
        "name": "Merino Green Wool",
        "description": "Premium merino wool fabric in forest green. Excellent for winter clothing and accessories.",
        "price": "58.00",
        "stock": 43,
        "images": [
            "https://images.unsplash.com/photo-1606107557195-0e29a4b5b4aa?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Merino Wool",
            "width": "150cm",
            "weight": "300 GSM",
            "care": "Hand Wash Only",
        },
        "reviews": [
            ("Ahmed Al-Mansouri", 5, True,
             "Excellent merino wool! Perfect for winter garments. The green color is rich and beautiful."),
        ],
    },
    {
        "category": "synthetic",
        "name": "Patterned Polyester",
        "description": "Modern patterned polyester fabric with geometric designs. Great for contemporary fashion.",
        "price": "28.00",
        "stock": 67,
        "images": [
            "https://images.unsplash.com/photo-1562157873-818bc0726f68?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Polyester",
            "width": "145cm",
            "weight": "150 GSM",
            "care": "Machine Wash Warm",
        },
        "reviews": [],
    },
    {
        "category": "silk",
        "name": "Golden Silk Dupioni",
        "description": "Elegant golden silk dupioni with natural texture variations. "
                       "Perfect for traditional and formal wear.",
        "price": "65.00",
        "stock": 25,
        "images": [
            "https://images.unsplash.com/photo-1582582621959-48d27397dc69?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Silk Dupioni",
            "width": "140cm",
            "weight": "140 GSM",
            "care": "Dry Clean Only",
        },
        "reviews": [
            ("Layla Rashid", 5, True,
             "This golden silk dupioni is absolutely stunning! Used it for a traditional dress "
             "and received so many compliments."),
        ],
    },
    {
        "category": "cotton",
        "name": "Egyptian Cotton White",
        "description": "Premium Egyptian cotton in pure white. Superior quality and softness for luxury projects.",
        "price": "42.00",
        "stock": 85,
        "images": [
            "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?auto=format&fit=crop&w=800&h=800",
        ],
        "specifications": {
            "material": "100% Egyptian Cotton",
            "width": "150cm",
            "weight": "180 GSM",
            "care": "Machine Wash Cold",
        },
        "reviews": [],
    },
]


# =============================================================================
# SYSTEM COMMANDS
# =============================================================================

@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create all tables. Safe to run repeatedly."""
    db.create_all()
    click.echo("PASS Tables created. Next: 'python -m flask catalog seed' and 'python -m flask users create-admin'.")


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

    click.echo("PASS Database reset complete.")


# =============================================================================
# CATALOG COMMANDS
# =============================================================================

@click.group('catalog')
def catalog_group():
    """Catalog seeding commands."""


def seed_catalog() -> dict:
    """
    Insert the sample fabric catalog.

    Products go through products_service.create_product so their initial
    stock is recorded in the inventory ledger. Returns counts of inserted rows.
    """
    categories = {}
    for data in SEED_CATEGORIES:
        fields = {k: v for k, v in data.items() if k != "key"}
        categories[data["key"]] = products_service.create_category(patch=fields)

    product_count = 0
    review_count = 0
    for data in SEED_PRODUCTS:
        product = products_service.create_product(patch={
            "name": data["name"],
            "description": data["description"],
            "price_cents": to_cents(data["price"]),
            "category_id": categories[data["category"]].id,
            "stock": data["stock"],
            "images": data["images"],
            "specifications": data["specifications"],
        })
        product_count += 1

        for user_name, rating, verified, comment in data["reviews"]:
            db.session.add(Review(
                product_id=product.id,
                user_name=user_name,
                rating=rating,
                comment=comment,
                is_verified=verified,
            ))
            review_count += 1

    db.session.commit()
    return {"categories": len(categories), "products": product_count, "reviews": review_count}


@catalog_group.command('seed')
@with_appcontext
def seed_catalog_cli():
    """Insert sample categories, products and reviews into an empty catalog."""
    if db.session.query(Category).count() > 0:
        click.echo("WARN Catalog already has categories, skipping seed.")
        return

    counts = seed_catalog()
    click.echo(
        f"PASS Seeded {counts['categories']} categories, "
        f"{counts['products']} products, {counts['reviews']} reviews"
    )


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create-admin')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin_cli(name, email, password):
    """
    Create a back-office admin.

    Password must be at least 8 characters with a letter and a digit.
    """
    try:
        user = create_admin(name=name, email=email, password=password)
    except (ValidationError, DuplicateEmailError) as e:
        click.echo(f"FAIL {str(e)}")
        raise SystemExit(1)

    click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")


# =============================================================================
# MAINTENANCE COMMANDS
# =============================================================================

@click.group('sessions')
def sessions_group():
    """Session maintenance commands."""


@sessions_group.command('purge')
@with_appcontext
def purge_sessions_cli():
    """Delete sessions whose expiry has passed."""
    deleted = session_service.purge_expired_sessions()
    click.echo(f"PASS Deleted {deleted} expired session(s)")


@click.group('customers')
def customers_group():
    """Customer aggregate maintenance."""


@customers_group.command('reconcile')
@click.option('--dry-run', is_flag=True, help='Report drift without fixing it')
@with_appcontext
def reconcile_customers_cli(dry_run):
    """Recompute totalOrders/totalSpent from order history."""
    corrections = customer_service.reconcile_customer_aggregates(dry_run=dry_run)
    label = "DRIFT" if dry_run else "FIXED"
    for c in corrections:
        click.echo(
            f"{label} {c['email']}: orders {c['before']['totalOrders']} -> {c['after']['totalOrders']}, "
            f"spent_cents {c['before']['totalSpentCents']} -> {c['after']['totalSpentCents']}"
        )
    if dry_run:
        click.echo(f"DONE {len(corrections)} customer(s) drifted (dry run, nothing changed)")
    else:
        click.echo(f"PASS Reconciled {len(corrections)} customer(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(users_group)
    app.cli.add_command(sessions_group)
    app.cli.add_command(customers_group)
