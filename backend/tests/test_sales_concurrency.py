"""
Concurrent sale tests against a temporary file database.

An in-memory SQLite database is a single shared connection, so these tests
build their own application on a file so each thread gets a real connection
and competes for the write lock.
"""

import os
import tempfile
import threading
from decimal import Decimal

import pytest

from bakery import create_app
from bakery.errors import InsufficientStockError
from bakery.extensions import db
from bakery.models import FinancialMovement, InventoryMovement, Product, Sale
from bakery.permissions import ROLE_SELLER
from bakery.services.auth_service import create_user
from bakery.services.sales_service import SaleItemRequest, SaleRequest, get_sales_service


@pytest.fixture
def file_app():
    tmpdir = tempfile.TemporaryDirectory()
    db_path = os.path.join(tmpdir.name, "concurrency.db")
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        user = create_user(name="Concurrent Seller", email="concurrent@bakery.test", password="secret123", role=ROLE_SELLER)
        product = Product(code="CONCUR-1", name="Sourdough", price=Decimal("4.50"), stock=10)
        db.session.add(product)
        db.session.commit()
        app.config["TEST_USER_ID"] = user.id
        app.config["TEST_PRODUCT_ID"] = product.id
        db.session.remove()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.session.remove()
        db.engine.dispose()
    tmpdir.cleanup()


def _run_concurrent_sales(app, quantities):
    results = []
    lock = threading.Lock()
    start = threading.Barrier(len(quantities))

    def worker(quantity):
        with app.app_context():
            request = SaleRequest(items=(SaleItemRequest(app.config["TEST_PRODUCT_ID"], quantity),))
            try:
                start.wait()
                sale = get_sales_service().create_sale(app.config["TEST_USER_ID"], request)
                with lock:
                    results.append(sale.code)
            except Exception as exc:
                with lock:
                    results.append(exc)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(q,)) for q in quantities]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def test_two_sales_of_six_against_ten_units_one_wins(file_app):
    results = _run_concurrent_sales(file_app, [6, 6])

    codes = [r for r in results if isinstance(r, str)]
    errors = [r for r in results if not isinstance(r, str)]
    assert len(codes) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], InsufficientStockError)
    assert errors[0].details["available"] == 4

    with file_app.app_context():
        product = db.session.get(Product, file_app.config["TEST_PRODUCT_ID"])
        assert product.stock == 4
        assert db.session.query(Sale).count() == 1
        assert db.session.query(InventoryMovement).count() == 1
        assert db.session.query(FinancialMovement).count() == 1


def test_many_small_sales_never_oversell(file_app):
    results = _run_concurrent_sales(file_app, [2] * 8)

    codes = [r for r in results if isinstance(r, str)]
    errors = [r for r in results if not isinstance(r, str)]
    assert len(codes) == 5
    assert all(isinstance(e, InsufficientStockError) for e in errors)
    # Codes come from one sequence and are never reused
    assert len(set(codes)) == len(codes)

    with file_app.app_context():
        product = db.session.get(Product, file_app.config["TEST_PRODUCT_ID"])
        assert product.stock == 0
        sold = sum(m.quantity for m in db.session.query(InventoryMovement).all())
        assert sold == 10
        assert db.session.query(FinancialMovement).count() == 5
