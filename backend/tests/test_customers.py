"""
Customer aggregate tests.

Verifies:
- Aggregates increment once per placed order
- List ordering (recent buyers first, never-ordered last)
- Detail includes order history
- Reconciliation repairs drifted counters from order history
"""

from storefront.models import Customer
from storefront.services import cart_service, checkout_service, customer_service


SHIPPING = {"street": "Marina Walk", "city": "Dubai"}


def _place(user, product, quantity=1):
    cart_service.add_item(user.id, product.id, quantity)
    return checkout_service.checkout(user, shipping_address=SHIPPING, payment_method="cod")


class TestAggregates:

    def test_two_orders_accumulate(self, customer_user, product, db_session):
        o1 = _place(customer_user, product, 1)
        o2 = _place(customer_user, product, 3)

        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        assert customer.total_orders == 2
        assert customer.total_spent_cents == o1.total_cents + o2.total_cents

    def test_record_order_without_customer_is_noop(self, db_session):
        assert customer_service.record_order("ghost@example.ae", 1000) is None


class TestCustomerEndpoints:

    def test_list_order(self, client, admin_headers, customer_user, other_customer, product):
        _place(other_customer, product)

        data = client.get("/api/customers", headers=admin_headers).get_json()
        emails = [c["email"] for c in data]
        assert emails.index("omar@example.ae") < emails.index("aisha@example.ae")

        omar = next(c for c in data if c["email"] == "omar@example.ae")
        assert omar["totalOrders"] == 1
        assert omar["lastOrderAt"] is not None

    def test_detail_includes_orders(self, client, admin_headers, customer_user, product, db_session):
        order = _place(customer_user, product, 2)
        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()

        resp = client.get(f"/api/customers/{customer.id}", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["totalOrders"] == 1
        assert data["totalSpent"] == f"{order.total_cents / 100:.2f}"
        assert [o["id"] for o in data["orders"]] == [order.id]

    def test_unknown_customer_404(self, client, admin_headers, db_session):
        assert client.get("/api/customers/999", headers=admin_headers).status_code == 404


class TestReconcile:

    def test_repairs_drift(self, customer_user, product, db_session):
        order = _place(customer_user, product, 1)

        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        customer.total_orders = 7
        customer.total_spent_cents = 1
        db_session.commit()

        corrections = customer_service.reconcile_customer_aggregates()
        assert len(corrections) == 1
        assert corrections[0]["before"] == {"totalOrders": 7, "totalSpentCents": 1}
        assert corrections[0]["after"] == {"totalOrders": 1, "totalSpentCents": order.total_cents}

        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        assert customer.total_orders == 1
        assert customer.total_spent_cents == order.total_cents

    def test_consistent_data_untouched(self, customer_user, product):
        _place(customer_user, product, 1)
        assert customer_service.reconcile_customer_aggregates() == []

    def test_cli_reconcile(self, app, customer_user, product, db_session):
        _place(customer_user, product, 1)
        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        customer.total_orders = 0
        db_session.commit()

        result = app.test_cli_runner().invoke(args=["customers", "reconcile"])
        assert result.exit_code == 0
        assert "Reconciled 1 customer(s)" in result.output

        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        assert customer.total_orders == 1

    def test_cli_reconcile_dry_run_changes_nothing(self, app, customer_user, product, db_session):
        _place(customer_user, product, 1)
        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        customer.total_orders = 5
        db_session.commit()

        result = app.test_cli_runner().invoke(args=["customers", "reconcile", "--dry-run"])
        assert result.exit_code == 0
        assert "DRIFT aisha@example.ae" in result.output

        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        assert customer.total_orders == 5

    def test_dry_run_reports_without_writing(self, customer_user, product, db_session):
        order = _place(customer_user, product, 1)
        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        customer.total_spent_cents = 0
        db_session.commit()

        drift = customer_service.reconcile_customer_aggregates(dry_run=True)
        assert [d["after"] for d in drift] == [{"totalOrders": 1, "totalSpentCents": order.total_cents}]

        db_session.expire_all()
        customer = db_session.query(Customer).filter_by(email=customer_user.email).one()
        assert customer.total_spent_cents == 0

        # The real run fixes exactly what the dry run reported
        assert customer_service.reconcile_customer_aggregates() == drift
