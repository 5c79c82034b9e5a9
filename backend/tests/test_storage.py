"""
Collection storage tests.

Verifies:
- First read writes seed data
- Reads hand out copies; only add/update/delete change storage
- Unreadable snapshots fall back to seed data
- The SQL backend persists snapshots in storage_entries
"""

import json

import pytest
from sqlalchemy.exc import OperationalError

from stockbook import create_app
from stockbook.extensions import db, store
from stockbook.models import Brand, Category, Product, StorageEntry
from stockbook.seeds import DEFAULT_ADMIN_USERNAME
from stockbook.storage import MemoryBackend, COLLECTIONS


class TestSeeds:

    def test_first_read_writes_seed(self, app):
        assert [p.name for p in store.products.all()] == [
            "Wireless Mouse", "Mechanical Keyboard", "USB-C Monitor",
        ]
        stored = json.loads(store.backend.read("products"))
        assert [p["stock"] for p in stored] == [50, 15, 8]

    def test_seed_contents(self, app):
        assert [c.name for c in store.categories.all()] == ["Electronics", "Monitors"]
        assert [b.name for b in store.brands.all()] == ["Logitech", "Dell"]
        (admin,) = store.users.all()
        assert admin.username == DEFAULT_ADMIN_USERNAME
        assert admin.role == "SUPERADMIN"
        for name in ("invoices", "purchase_orders", "returns"):
            assert store.repository(name).all() == []
        assert store.session.get() is None


class TestRepository:

    def test_reads_are_copies(self, app):
        product = store.products.get("1")
        product.stock = 999
        assert store.products.get("1").stock == 50

    def test_update_and_delete(self, app):
        product = store.products.get("1")
        product.stock = 7
        store.products.update(product)
        assert json.loads(store.backend.read("products"))[0]["stock"] == 7

        assert store.products.delete("1").name == "Wireless Mouse"
        assert store.products.delete("1") is None
        assert store.products.count() == 2

    def test_update_unknown_raises(self, app):
        with pytest.raises(KeyError):
            store.categories.update(Category(id="nope", name="x"))

    def test_reload_rereads_backend(self, app):
        store.categories.all()
        store.backend.write("categories", json.dumps([{"id": "9", "name": "Audio"}]))
        assert [c.name for c in store.categories.all()] == ["Electronics", "Monitors"]
        store.reload()
        assert [c.name for c in store.categories.all()] == ["Audio"]

    def test_wipe_reseeds(self, app):
        store.products.delete("1")
        store.wipe()
        assert store.products.count() == 3


class TestParseFallback:

    @pytest.mark.parametrize("raw", [
        "not json",
        json.dumps({"id": "1"}),
        json.dumps([{"name": "no id"}]),
        json.dumps([{"id": "1", "customer_name": "c", "date": "2026-01-01", "status": "Sent"}]),
    ])
    def test_bad_snapshot_resets_to_seed(self, caplog, raw):
        key = "products" if "customer_name" not in raw else "invoices"
        backend = MemoryBackend({key: raw})
        app = create_app({
            "TESTING": True,
            "STORAGE_BACKEND": "memory",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "BCRYPT_ROUNDS": 4,
        })
        store.init_app(app, backend=backend)

        with app.app_context():
            expected = len(COLLECTIONS[key].seed())
            assert store.repository(key).count() == expected
            assert "resetting to seed data" in caplog.text
            assert json.loads(backend.read(key)) == [r.to_dict() for r in store.repository(key).all()]

    def test_bad_session_signs_out(self, caplog):
        backend = MemoryBackend({"current_session": "{broken"})
        app = create_app({
            "TESTING": True,
            "STORAGE_BACKEND": "memory",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        })
        store.init_app(app, backend=backend)

        with app.app_context():
            assert store.session.get() is None
            assert backend.read("current_session") is None


class TestSqlBackend:

    @pytest.fixture
    def sql_app(self):
        app = create_app({
            "TESTING": True,
            "STORAGE_BACKEND": "sql",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "BCRYPT_ROUNDS": 4,
        })
        with app.app_context():
            yield app
            db.session.remove()
            db.drop_all()

    def test_snapshots_land_in_storage_entries(self, sql_app):
        product = store.products.get("3")
        product.stock = 1
        store.products.update(product)

        entry = db.session.get(StorageEntry, "products")
        assert json.loads(entry.value)[2]["stock"] == 1
        assert entry.to_dict()["key"] == "products"

    def test_survives_cache_reload(self, sql_app):
        store.brands.add(Brand(id="3", name="Keychron"))
        store.reload()
        assert [b.name for b in store.brands.all()] == ["Logitech", "Dell", "Keychron"]

    def test_keys_and_delete(self, sql_app):
        store.products.all()
        store.users.all()
        assert store.backend.keys() == ["products", "users"]
        store.wipe()
        assert store.backend.keys() == []

    def test_failed_commit_is_rolled_back(self, sql_app, monkeypatch):
        store.brands.all()
        store.categories.all()

        def failing_commit():
            raise OperationalError("UPDATE storage_entries", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db.session, "commit", failing_commit)
        with pytest.raises(OperationalError):
            store.brands.add(Brand(id="3", name="Keychron"))
        monkeypatch.undo()

        store.categories.add(Category(id="3", name="Audio"))

        brands = json.loads(db.session.get(StorageEntry, "brands").value)
        assert [b["name"] for b in brands] == ["Logitech", "Dell"]
        assert [b.name for b in store.brands.all()] == ["Logitech", "Dell"]

    def test_entries_for_health(self, sql_app):
        store.products.all()
        (entry,) = store.backend.entries()
        assert entry["key"] == "products"
        assert entry["size"] > 0
        assert entry["updated_at"].endswith("Z")


class TestFailedWrites:

    @pytest.fixture
    def failing_backend(self, app, monkeypatch):
        """Backend whose writes to the given key raise; other keys write normally."""
        backend = store.backend
        original = backend.write

        def fail_on(key):
            def write(k, value):
                if k == key:
                    raise RuntimeError("storage unavailable")
                return original(k, value)
            monkeypatch.setattr(backend, "write", write)

        return fail_on

    def test_cache_keeps_stored_state(self, failing_backend):
        from stockbook.services import invoice_service

        store.invoices.all()
        failing_backend("invoices")

        with pytest.raises(RuntimeError):
            invoice_service.create_invoice(
                customer_name="Acme",
                items=[{"product_id": "1", "quantity": 1}],
                created_by="admin",
            )

        assert store.invoices.count() == 0
        assert store.backend.read("invoices") == "[]"

    @pytest.mark.parametrize("mutate", [
        lambda: store.products.delete("1"),
        lambda: store.products.replace_all([]),
        lambda: store.products.update_many([Product(id="1", name="Renamed")]),
    ])
    def test_mutations_leave_cache_untouched(self, failing_backend, mutate):
        store.products.all()
        failing_backend("products")

        with pytest.raises(RuntimeError):
            mutate()

        assert [p.name for p in store.products.all()] == [
            "Wireless Mouse", "Mechanical Keyboard", "USB-C Monitor",
        ]
