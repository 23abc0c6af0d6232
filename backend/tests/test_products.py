"""
Catalog tests: products, categories, reviews.

Verifies:
- Create -> fetch round-trip returns the submitted values
- Multipart create records uploaded images as /uploads/ URLs
- Listing filters (category, search) and soft delete
- Stock changes made through product update are logged
"""

import io

from storefront.models import InventoryLog, Product


def _product_body(category_id, **overrides):
    body = {
        "name": "Golden Silk Dupioni",
        "description": "Elegant golden silk dupioni with natural texture variations.",
        "price": "65.00",
        "categoryId": category_id,
        "stock": 25,
        "images": ["https://cdn.example.ae/dupioni.jpg"],
        "specifications": {"material": "100% Silk Dupioni", "width": "140cm"},
    }
    body.update(overrides)
    return body


class TestProductCreate:

    def test_round_trip(self, client, admin_headers, category):
        body = _product_body(category.id)
        created = client.post("/api/products", json=body, headers=admin_headers)
        assert created.status_code == 201
        product_id = created.get_json()["id"]

        fetched = client.get(f"/api/products/{product_id}").get_json()
        for field in ("name", "description", "price", "categoryId", "stock", "images", "specifications"):
            assert fetched[field] == body[field], field
        assert fetched["isActive"] is True
        assert fetched["barcode"]
        assert fetched["createdAt"].endswith("Z")

    def test_default_image(self, client, admin_headers, category):
        body = _product_body(category.id)
        del body["images"]
        data = client.post("/api/products", json=body, headers=admin_headers).get_json()
        assert len(data["images"]) == 1

    def test_multipart_upload(self, client, admin_headers, category):
        data = {
            "name": "Patterned Polyester",
            "description": "Geometric designs",
            "price": "28.00",
            "categoryId": str(category.id),
            "stock": "67",
            "specifications": '{"material": "100% Polyester"}',
            "images": [
                (io.BytesIO(b"img-1"), "front view.jpg"),
                (io.BytesIO(b"img-2"), "detail.png"),
            ],
        }
        resp = client.post(
            "/api/products",
            data=data,
            headers=admin_headers,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201

        product = resp.get_json()
        assert product["price"] == "28.00"
        assert product["stock"] == 67
        assert product["specifications"] == {"material": "100% Polyester"}
        assert len(product["images"]) == 2
        assert product["images"][0].startswith("/uploads/")
        assert product["images"][0].endswith("-0-front_view.jpg")
        assert product["images"][1].endswith("-1-detail.png")

    def test_missing_fields(self, client, admin_headers, category):
        resp = client.post("/api/products", json={"name": "Nameless"}, headers=admin_headers)
        assert resp.status_code == 400
        assert "Missing required fields" in resp.get_json()["error"]

    def test_unknown_category(self, client, admin_headers, db_session):
        resp = client.post("/api/products", json=_product_body(999), headers=admin_headers)
        assert resp.status_code == 400

    def test_negative_stock_rejected(self, client, admin_headers, category):
        resp = client.post("/api/products", json=_product_body(category.id, stock=-1), headers=admin_headers)
        assert resp.status_code == 400

    def test_bad_price_rejected(self, client, admin_headers, category):
        resp = client.post("/api/products", json=_product_body(category.id, price="abc"), headers=admin_headers)
        assert resp.status_code == 400

    def test_unknown_field_rejected(self, client, admin_headers, category):
        resp = client.post("/api/products", json=_product_body(category.id, barcode="|||"), headers=admin_headers)
        assert resp.status_code == 400


class TestProductReadAndList:

    def test_unknown_product_404(self, client, db_session):
        resp = client.get("/api/products/12345")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Product not found"

    def test_newest_first(self, client, make_product):
        first = make_product(name="First")
        second = make_product(name="Second")
        ids = [p["id"] for p in client.get("/api/products").get_json()]
        assert ids == [second.id, first.id]

    def test_search_case_insensitive(self, client, make_product):
        make_product(name="Premium Blue Silk")
        make_product(name="Organic Red Cotton")
        names = [p["name"] for p in client.get("/api/products?search=SILK").get_json()]
        assert names == ["Premium Blue Silk"]

    def test_category_filter(self, client, admin_headers, make_product):
        cotton = client.post("/api/categories", json={"name": "Cotton"}, headers=admin_headers).get_json()
        make_product(name="Silk one")
        make_product(name="Cotton one", category_id=cotton["id"])

        names = [p["name"] for p in client.get(f"/api/products?category={cotton['id']}").get_json()]
        assert names == ["Cotton one"]

    def test_blank_search_keeps_category_filter(self, client, admin_headers, make_product):
        cotton = client.post("/api/categories", json={"name": "Cotton"}, headers=admin_headers).get_json()
        make_product(name="Silk one")
        make_product(name="Cotton one", category_id=cotton["id"])

        resp = client.get("/api/products", query_string={"category": cotton["id"], "search": "   "})
        assert [p["name"] for p in resp.get_json()] == ["Cotton one"]

    def test_bad_category_filter(self, client, db_session):
        assert client.get("/api/products?category=silk").status_code == 400


class TestProductUpdateAndDelete:

    def test_partial_update(self, client, admin_headers, product):
        resp = client.put(
            f"/api/products/{product.id}",
            json={"price": "50.00", "specifications": {"care": "Dry Clean Only"}},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["price"] == "50.00"
        assert data["specifications"] == {"care": "Dry Clean Only"}
        assert data["name"] == "Premium Blue Silk"

    def test_stock_update_is_logged(self, client, admin_headers, product, db_session):
        client.put(f"/api/products/{product.id}", json={"stock": 120}, headers=admin_headers)

        log = (
            db_session.query(InventoryLog)
            .filter_by(product_id=product.id)
            .order_by(InventoryLog.id.desc())
            .first()
        )
        assert (log.action, log.quantity, log.previous_stock, log.new_stock) == ("add", 20, 100, 120)
        assert log.reason == "Product update"

    def test_update_unknown_404(self, client, admin_headers, db_session):
        resp = client.put("/api/products/999", json={"name": "x"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_soft_delete(self, client, admin_headers, product, db_session):
        resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)
        assert resp.status_code == 200

        assert db_session.get(Product, product.id).is_active is False
        assert client.get("/api/products").get_json() == []
        # Still resolvable by id for order history
        assert client.get(f"/api/products/{product.id}").status_code == 200

    def test_delete_unknown_404(self, client, admin_headers, db_session):
        assert client.delete("/api/products/999", headers=admin_headers).status_code == 404


class TestReviews:

    def test_create_and_list(self, client, product):
        first = client.post(
            f"/api/products/{product.id}/reviews",
            json={"userName": "Fatima Al-Zahra", "rating": 5, "comment": "Beautiful fabric"},
        )
        assert first.status_code == 201
        assert first.get_json()["isVerified"] is False

        client.post(
            f"/api/products/{product.id}/reviews",
            json={"userName": "Sara Ahmed", "rating": 4, "comment": "Good quality"},
        )

        reviews = client.get(f"/api/products/{product.id}/reviews").get_json()
        assert [r["userName"] for r in reviews] == ["Sara Ahmed", "Fatima Al-Zahra"]

        assert client.get(f"/api/products/{product.id}").get_json()["averageRating"] == 4.5

    def test_rating_range(self, client, product):
        for rating in (0, 6):
            resp = client.post(
                f"/api/products/{product.id}/reviews",
                json={"userName": "X", "rating": rating, "comment": "c"},
            )
            assert resp.status_code == 400

    def test_unknown_product(self, client, db_session):
        resp = client.post(
            "/api/products/999/reviews",
            json={"userName": "X", "rating": 3, "comment": "c"},
        )
        assert resp.status_code == 404
