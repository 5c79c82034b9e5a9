"""
HTTP API tests (Flask test client).

Verifies:
- Unauthenticated requests return 401, inactive accounts 403
- Capability gates per area, Superadmin-only billing
- Error mapping: 400 validation, 404 missing, 409 insufficient stock
- Access changes apply to the signed-in user on the next request
"""

import pytest

from stockbook.extensions import store
from stockbook.models import UserRole
from stockbook.services import team_service


MOUSE = "1"
MONITOR = "3"


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/catalog/categories"),
            ("GET", "/api/invoices"),
            ("POST", "/api/invoices"),
            ("GET", "/api/orders"),
            ("GET", "/api/returns"),
            ("GET", "/api/team/users"),
            ("GET", "/api/reports/dashboard"),
            ("GET", "/api/reports/financial"),
            ("GET", "/api/billing"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_health_is_public(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["checks"]["storage"]["status"] == "healthy"

    def test_health_lists_stored_keys(self, client):
        store.products.all()
        entries = client.get("/api/health").get_json()["checks"]["storage"]["details"]["entries"]
        assert [e["key"] for e in entries] == ["products"]
        assert entries[0]["size"] > 0


# =============================================================================
# AUTH
# =============================================================================


class TestAuthRoutes:

    def test_login_and_me(self, admin_client):
        resp = admin_client.get("/api/auth/me")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["user"]["username"] == "admin"
        assert "password_hash" not in body["user"]
        assert "superadmin" in body["capabilities"]

    def test_bad_credentials(self, client, login_as):
        resp = login_as("admin", "wrong")
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_credentials"

    def test_missing_fields(self, client):
        assert client.post("/api/auth/login", json={"username": "admin"}).status_code == 400

    def test_inactive_login(self, client, login_as, make_user):
        make_user("sleepy", is_active=False)
        resp = login_as("sleepy")
        assert resp.status_code == 403
        assert resp.get_json()["code"] == "account_inactive"

    def test_logout(self, admin_client):
        assert admin_client.post("/api/auth/logout").status_code == 200
        assert admin_client.get("/api/auth/me").status_code == 401

    def test_register_signs_in(self, client):
        resp = client.post("/api/auth/register", json={"username": "newbie", "password": "pw"})
        assert resp.status_code == 201
        assert resp.get_json()["user"]["role"] == UserRole.MEMBER
        assert client.get("/api/auth/me").get_json()["user"]["username"] == "newbie"

    def test_register_taken_username_is_noop(self, client):
        resp = client.post("/api/auth/register", json={"username": "admin", "password": "pw"})
        assert resp.status_code == 200
        assert resp.get_json() == {"created": False}

    def test_register_validation(self, client):
        resp = client.post("/api/auth/register", json={"username": "x", "password": "pw", "role": "OWNER"})
        assert resp.status_code == 400

    def test_register_admin_gets_member_flags(self, client):
        resp = client.post("/api/auth/register", json={"username": "boss", "password": "pw", "role": "ADMIN"})
        assert resp.status_code == 201

        stored = store.users.find(lambda u: u.username == "boss")
        assert stored.role == UserRole.ADMIN
        assert stored.permissions.to_dict() == {
            "inventory": True, "invoices": True, "orders": False, "reports": False, "team": False,
        }
        assert client.get("/api/orders").status_code == 403


# =============================================================================
# CAPABILITY GATES
# =============================================================================


class TestCapabilityGates:

    def test_member_defaults(self, client, login_as, make_user):
        make_user("mem")
        login_as("mem")

        assert client.get("/api/products").status_code == 200
        assert client.get("/api/invoices").status_code == 200
        assert client.get("/api/reports/dashboard").status_code == 200
        assert client.get("/api/orders").status_code == 403
        assert client.get("/api/returns").status_code == 403
        assert client.get("/api/reports/financial").status_code == 403
        assert client.get("/api/team/users").status_code == 403
        assert client.get("/api/billing").status_code == 403

    def test_member_cannot_approve_po(self, client, login_as, make_user):
        po = store.purchase_orders.count()
        make_user("mem")
        login_as("mem")
        resp = client.post("/api/orders/whatever/approve")
        assert resp.status_code == 403
        assert resp.get_json()["required_permission"] == "orders"
        assert store.purchase_orders.count() == po

    def test_admin_has_no_billing(self, client, login_as, make_user):
        make_user("adm", UserRole.ADMIN)
        login_as("adm")
        assert client.get("/api/orders").status_code == 200
        assert client.get("/api/billing").status_code == 403

    def test_superadmin_billing(self, admin_client):
        resp = admin_client.get("/api/billing")
        assert resp.status_code == 200
        assert resp.get_json()["usage"]["products"] == 3

    def test_revocation_applies_on_next_request(self, client, login_as, make_user, admin):
        member = make_user("mem")
        login_as("mem")
        assert client.get("/api/invoices").status_code == 200

        team_service.update_user_permissions(admin, member.id, {"invoices": False})
        assert client.get("/api/invoices").status_code == 403

    def test_deactivated_session_is_refused(self, client, login_as, make_user, admin):
        member = make_user("mem")
        login_as("mem")
        team_service.toggle_user_status(admin, member.id)

        resp = client.get("/api/products")
        assert resp.status_code == 403
        assert resp.get_json()["code"] == "account_inactive"


# =============================================================================
# INVOICES
# =============================================================================


class TestInvoiceRoutes:

    def test_paid_invoice_lifecycle(self, admin_client):
        resp = admin_client.post("/api/invoices", json={
            "customer_name": "Acme",
            "status": "Paid",
            "items": [{"product_id": MONITOR, "quantity": 8}],
        })
        assert resp.status_code == 201
        invoice = resp.get_json()["invoice"]
        assert invoice["total_cents"] == 8 * 34999
        assert invoice["created_by"] == "admin"
        assert store.products.get(MONITOR).stock == 0

        resp = admin_client.post("/api/invoices", json={
            "customer_name": "Globex",
            "status": "Paid",
            "items": [{"product_id": MONITOR, "quantity": 1}],
        })
        assert resp.status_code == 409
        assert resp.get_json()["details"]["lines"][0]["max_available"] == 0

        resp = admin_client.put(f"/api/invoices/{invoice['id']}", json={
            "customer_name": "Acme",
            "status": "Paid",
            "items": [{"product_id": MONITOR, "quantity": 3}],
        })
        assert resp.status_code == 200
        assert store.products.get(MONITOR).stock == 5

        assert admin_client.delete(f"/api/invoices/{invoice['id']}").status_code == 200
        assert store.products.get(MONITOR).stock == 8

    def test_validation_and_missing(self, admin_client):
        resp = admin_client.post("/api/invoices", json={"customer_name": "", "items": []})
        assert resp.status_code == 400

        resp = admin_client.put("/api/invoices/nope", json={
            "customer_name": "A", "status": "Draft", "items": [{"product_id": MOUSE, "quantity": 1}],
        })
        assert resp.status_code == 404

        assert admin_client.put("/api/invoices/nope", json={"customer_name": "A"}).status_code == 400
        assert admin_client.delete("/api/invoices/nope").status_code == 404

    def test_list_and_bulk_delete(self, admin_client):
        ids = []
        for name in ("Acme", "Globex"):
            resp = admin_client.post("/api/invoices", json={
                "customer_name": name, "items": [{"product_id": MOUSE, "quantity": 1}],
            })
            assert resp.get_json()["invoice"]["status"] == "Draft"
            ids.append(resp.get_json()["invoice"]["id"])

        body = admin_client.get("/api/invoices?search=glob").get_json()
        assert [i["customer_name"] for i in body["items"]] == ["Globex"]

        assert admin_client.post("/api/invoices/bulk-delete", json={"ids": []}).status_code == 400
        resp = admin_client.post("/api/invoices/bulk-delete", json={"ids": ids})
        assert resp.status_code == 200
        assert store.invoices.count() == 0


# =============================================================================
# PRODUCTS / CATALOG
# =============================================================================


class TestProductRoutes:

    def test_crud(self, admin_client):
        resp = admin_client.post("/api/products", json={
            "name": "Webcam", "sku": "WC-004", "price_cents": 4999, "cost_cents": 2500, "stock": 4,
        })
        assert resp.status_code == 201
        product_id = resp.get_json()["product"]["id"]

        resp = admin_client.patch(f"/api/products/{product_id}", json={"stock": 12})
        assert resp.get_json()["product"]["stock"] == 12

        body = admin_client.get("/api/products?search=web").get_json()
        assert [p["sku"] for p in body["items"]] == ["WC-004"]

        assert admin_client.delete(f"/api/products/{product_id}").status_code == 200
        assert admin_client.get(f"/api/products/{product_id}").status_code == 404

    def test_validation(self, admin_client):
        assert admin_client.post("/api/products", json={"name": "x"}).status_code == 400
        assert admin_client.post("/api/products", json={
            "name": "x", "sku": "y", "price_cents": 1, "id": "hijack",
        }).status_code == 400
        assert admin_client.patch(f"/api/products/{MOUSE}", json={"price_cents": -5}).status_code == 400

    def test_pagination(self, admin_client):
        body = admin_client.get("/api/products?page=1&per_page=2").get_json()
        assert body["count"] == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_next"] is True

    def test_low_stock(self, admin_client):
        body = admin_client.get("/api/products/low-stock").get_json()
        assert [p["name"] for p in body["items"]] == ["USB-C Monitor"]

    def test_describe_without_key(self, admin_client):
        resp = admin_client.post("/api/products/describe", json={"name": "Webcam"})
        assert resp.get_json()["description"] == "AI Configuration Missing (API Key)"

    def test_catalog_tags(self, admin_client):
        resp = admin_client.post("/api/catalog/brands", json={"name": "Keychron"})
        assert resp.status_code == 201
        brand_id = resp.get_json()["brand"]["id"]
        names = [b["name"] for b in admin_client.get("/api/catalog/brands").get_json()["items"]]
        assert names == ["Logitech", "Dell", "Keychron"]

        assert admin_client.delete(f"/api/catalog/brands/{brand_id}").status_code == 200
        assert admin_client.delete(f"/api/catalog/brands/{brand_id}").status_code == 404
        assert admin_client.post("/api/catalog/categories", json={"name": " "}).status_code == 400


# =============================================================================
# ORDERS / RETURNS / TEAM / REPORTS
# =============================================================================


class TestOtherRoutes:

    def test_order_approval(self, admin_client):
        resp = admin_client.post("/api/orders", json={
            "supplier": "Dell", "items": [{"product_name": "USB-C Monitor", "quantity": 5, "cost_cents": 20000}],
        })
        assert resp.status_code == 201
        po_id = resp.get_json()["order"]["id"]

        for _ in range(2):
            resp = admin_client.post(f"/api/orders/{po_id}/approve")
            assert resp.get_json()["order"]["status"] == "Approved"
        assert store.products.get(MONITOR).stock == 13
        assert admin_client.post("/api/orders/nope/approve").status_code == 404

    def test_returns(self, admin_client):
        invoice_id = admin_client.post("/api/invoices", json={
            "customer_name": "Acme", "items": [{"product_id": MOUSE, "quantity": 1}],
        }).get_json()["invoice"]["id"]

        assert admin_client.post("/api/returns", json={"invoice_id": "nope", "reason": "x"}).status_code == 404
        resp = admin_client.post("/api/returns", json={"invoice_id": invoice_id, "reason": "Broken"})
        assert resp.status_code == 201
        return_id = resp.get_json()["return"]["id"]

        resp = admin_client.post(f"/api/returns/{return_id}/process")
        assert resp.get_json()["return"]["status"] == "Processed"

    def test_team(self, admin_client):
        resp = admin_client.post("/api/team/users", json={
            "username": "mem", "password": "pw", "permissions": {"orders": True},
        })
        assert resp.status_code == 201
        user = resp.get_json()["user"]
        assert user["permissions"]["orders"] is True
        assert user["permissions"]["invoices"] is True

        again = admin_client.post("/api/team/users", json={"username": "mem", "password": "pw"})
        assert again.get_json() == {"created": False}

        resp = admin_client.put(f"/api/team/users/{user['id']}/permissions", json={"reports": True})
        assert resp.get_json()["user"]["permissions"]["reports"] is True

        resp = admin_client.post(f"/api/team/users/{user['id']}/toggle-status")
        assert resp.get_json()["user"]["is_active"] is False

        admin_id = store.users.find(lambda u: u.username == "admin").id
        assert admin_client.delete(f"/api/team/users/{admin_id}").status_code == 403
        assert admin_client.delete(f"/api/team/users/{user['id']}").status_code == 200
        assert admin_client.delete(f"/api/team/users/{user['id']}").status_code == 404

    def test_capability_labels(self, admin_client):
        items = admin_client.get("/api/team/capabilities").get_json()["items"]
        assert [c["code"] for c in items] == ["inventory", "invoices", "orders", "reports", "team"]
        assert items[2]["name"] == "Orders & Returns"

    def test_reports(self, admin_client):
        assert admin_client.get("/api/reports/dashboard").get_json()["low_stock_count"] == 1
        assert admin_client.get("/api/reports/financial").get_json()["revenue_cents"] == 0
        assert admin_client.post("/api/reports/insights").get_json()["insights"] == "AI Configuration Missing"


# =============================================================================
# CLI
# =============================================================================


class TestCli:

    def test_init_and_users(self, app):
        runner = app.test_cli_runner()

        result = runner.invoke(args=["system", "init"])
        assert result.exit_code == 0
        assert "admin / password" in result.output

        result = runner.invoke(args=["users", "create", "--username", "jane", "--password", "pw", "--role", "ADMIN"])
        assert result.exit_code == 0
        assert store.users.find(lambda u: u.username == "jane").role == UserRole.ADMIN

        result = runner.invoke(args=["users", "create", "--username", "jane", "--password", "pw"])
        assert result.exit_code != 0

        result = runner.invoke(args=["users", "list"])
        assert "jane" in result.output

    def test_reset(self, app):
        store.products.delete(MOUSE)
        result = app.test_cli_runner().invoke(args=["system", "reset", "--yes"])
        assert result.exit_code == 0
        assert store.products.count() == 3


# =============================================================================
# MALFORMED BODIES
# =============================================================================


class TestNonObjectBodies:

    def test_login(self, client):
        resp = client.post("/api/auth/login", json=["admin", "password"])
        assert resp.status_code == 400

    def test_register(self, client):
        assert client.post("/api/auth/register", json="newbie").status_code == 400

    @pytest.mark.parametrize("method,path", [
        ("POST", "/api/invoices"),
        ("PUT", "/api/invoices/nope"),
        ("POST", "/api/invoices/bulk-delete"),
        ("POST", "/api/products"),
        ("POST", "/api/products/describe"),
        ("POST", "/api/catalog/brands"),
        ("POST", "/api/orders"),
        ("POST", "/api/returns"),
        ("POST", "/api/team/users"),
        ("PUT", "/api/team/users/1/permissions"),
    ])
    def test_array_body_is_rejected(self, admin_client, method, path):
        resp = getattr(admin_client, method.lower())(path, json=[{"ids": ["x"]}])
        assert resp.status_code == 400, f"{method} {path} returned {resp.status_code}"
