"""
Pytest fixtures for CommCentre backend tests.

Provides test database setup, a fresh product catalog and test client.
"""

import pytest
from commcentre import create_app
from commcentre.config import TestConfig
from commcentre.extensions import db
from commcentre.models import Product, Job
from commcentre.services.catalog import ProductCatalog, get_catalog


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client (fresh cookie jar, so a fresh POS cart)."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        get_catalog().invalidate()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def catalog(db_session):
    """A cart-engine catalog independent of the application's one."""
    return ProductCatalog()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: insert a product with prices given in whole currency units."""
    def _make(name="A4 Paper", price=5, stock=10, cost=0, category="Stationery", barcode=None):
        p = Product(
            name=name,
            category=category,
            barcode=barcode,
            cost_price_cents=int(cost * 100),
            selling_price_cents=int(price * 100),
            stock_quantity=stock,
        )
        db_session.add(p)
        db_session.commit()
        return p
    return _make


@pytest.fixture(scope='function')
def make_job(db_session):
    """Factory: insert a job row directly, bypassing status normalization."""
    def _make(customer_name="Nimal", job_type="Wedding Cards", status="Pending", total=0, advance=0):
        job = Job(
            customer_name=customer_name,
            job_type=job_type,
            status=status,
            total_amount_cents=int(total * 100),
            advance_cents=int(advance * 100),
        )
        db_session.add(job)
        db_session.commit()
        return job
    return _make
