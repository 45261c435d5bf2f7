"""
Pytest fixtures for invoicing backend tests.

Provides an in-memory database, per-test table cleanup, and invoice fixtures.
"""

import pytest
from invoicing import create_app
from invoicing.config import TestingConfig
from invoicing.extensions import db
from invoicing.services import invoice_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def cli_runner(app):
    """Create CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def invoice(db_session):
    """Create a $200.00 invoice."""
    return invoice_service.create_invoice(200.00)


@pytest.fixture(scope='function')
def large_invoice(db_session):
    """Create a $500.00 invoice."""
    return invoice_service.create_invoice(500.00)
