# conftest.py

import io
import os
import tempfile

import pytest

# Set testing environment BEFORE importing app to prevent database corruption
# This ensures app.py uses TestingConfig when imported
os.environ["FLASK_ENV"] = "testing"

# Now import app and other modules after environment is set
from app import app as flask_app
from estate_app.models import AdminProfile, AdminRole, Landlord, OccupancyType, db


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    import uuid

    # Create a unique temporary database file for each test
    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")

    try:
        flask_app.config.update(
            {
                "TESTING": True,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
                "SECRET_KEY": "test-secret-key-for-testing-only",
                "DEBUG": True,
                "MONITORING_ENABLED": False,
                "ENABLE_FILE_LOGGING": False,
                "ENABLE_CONSOLE_LOGGING": True,
                "LOG_FORMAT": "text",
                "LOG_LEVEL": "DEBUG",
                "IMPORTER_ENABLED": True,
                "IMPORTER_MAX_UPLOAD_MB": 5,
                "IMPORTER_DEFAULT_ZONE": "Zone D",
            }
        )

        # Re-initialize logging with updated config to pick up LOG_LEVEL=DEBUG
        from estate_app.utils.logging_config import setup_logging

        setup_logging(flask_app)

        with flask_app.app_context():
            # Drop any existing tables to ensure clean state
            db.drop_all()
            db.create_all()
            yield flask_app
            db.session.remove()
            db.drop_all()
    finally:
        # Always close and remove the temporary database file, even on error
        try:
            os.close(db_fd)
        except OSError:
            pass
        try:
            if os.path.exists(temp_db):
                os.unlink(temp_db)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


def _create_admin(email, *, role=AdminRole.ADMIN, feature_permissions=None, password="adminpass123"):
    admin = AdminProfile(
        email=email,
        full_name=email.split("@")[0].title(),
        role=role,
        is_active=True,
    )
    if feature_permissions is not None:
        admin.feature_permissions = feature_permissions
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def chairman(app):
    """Chairman admin; holds every permission"""
    return _create_admin("chair@example.com", role=AdminRole.CHAIRMAN)


@pytest.fixture
def import_admin(app):
    """Regular admin with the default (all enabled) permissions"""
    return _create_admin("importer@example.com")


@pytest.fixture
def restricted_admin(app):
    """Admin without bulk_import or audit_log access"""
    return _create_admin(
        "restricted@example.com",
        feature_permissions={"bulk_import": False, "audit_log": False},
    )


def _login(client, admin):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(admin.id)
        sess["_fresh"] = True
    return client


@pytest.fixture
def logged_in_admin(client, import_admin):
    """Client with a session for ``import_admin``"""
    return _login(client, import_admin), import_admin


@pytest.fixture
def logged_in_restricted(client, restricted_admin):
    """Client with a session for ``restricted_admin``"""
    return _login(client, restricted_admin), restricted_admin


@pytest.fixture
def existing_landlord(app):
    """Landlord already stored with phone +2348011111111"""
    landlord = Landlord(
        full_name="Existing Owner",
        phone="+2348011111111",
        road="Road 9",
        zone="Zone D",
        occupancy_type=OccupancyType.OWNER,
    )
    db.session.add(landlord)
    db.session.commit()
    return landlord


@pytest.fixture
def csv_upload():
    """Build a multipart file payload from CSV text"""

    def _build(text, filename="landlords.csv"):
        return {"file": (io.BytesIO(text.encode("utf-8")), filename)}

    return _build


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    # Ensure FLASK_ENV is set to testing before any tests run
    # This is a safety measure in case conftest imports happen in unexpected order
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers"""
    for item in items:
        # Add slow marker to integration tests
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.slow)
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
