"""
Pytest fixtures for shop mapper backend tests.

Provides the app on in-memory SQLite, a per-test table wipe, seeded
territories/lorries/users/routes/shops, and signed-in test clients.
"""

import pytest

from shopmapper import create_app
from shopmapper.cli import seed_reference_data
from shopmapper.extensions import db
from shopmapper.models import Lorry, Route, Shop, Territory, User
from shopmapper.services.upload_service import UploadError


SEED_PASSWORD = "password123"


class FakeUploader:
    """Stands in for CloudinaryUploader; records uploads, can be told to fail."""

    def __init__(self):
        self.calls = []
        self.fail = False

    def upload(self, data, filename, content_type=None):
        self.calls.append((filename, content_type, len(data)))
        if self.fail:
            raise UploadError("simulated outage")
        return f"https://res.cloudinary.com/test/image/upload/shop-mapper/{filename}"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'REVALIDATE_TERRITORY': False,
        'CLOUDINARY_CLOUD_NAME': None,
        'CLOUDINARY_API_KEY': None,
        'CLOUDINARY_API_SECRET': None,
    })
    app.extensions['image_uploader'] = FakeUploader()

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def uploader(app):
    fake = FakeUploader()
    app.extensions['image_uploader'] = fake
    return fake


@pytest.fixture(scope='function')
def db_session(app, uploader):
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
        app.config['REVALIDATE_TERRITORY'] = False


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def seed(db_session):
    """
    Seeded reference data plus one route and one shop per lorry.

    Habaraduwa: Lorry 1..3 (rep1..rep3). Galle: Lorry 4..5 (rep4, rep5).
    """
    seed_reference_data(SEED_PASSWORD)

    territories = {t.name: t for t in db_session.query(Territory).all()}
    lorries = {l.name: l for l in db_session.query(Lorry).all()}
    users = {u.username: u for u in db_session.query(User).all()}

    routes = {}
    shops = {}
    for number in range(1, 6):
        lorry = lorries[f"Lorry {number}"]
        route = Route(name=f"Route {number}", lorry_id=lorry.id)
        db_session.add(route)
        db_session.flush()
        shop = Shop(
            name=f"Shop {number}",
            payment_method="CASH",
            payment_status="ON_TIME",
            avg_bill_value=1000.0,
            latitude=6.05 + number / 100,
            longitude=80.2 + number / 100,
            route_id=route.id,
        )
        db_session.add(shop)
        db_session.flush()
        routes[route.name] = route
        shops[shop.name] = shop
    db_session.commit()

    return {
        "territories": territories,
        "lorries": lorries,
        "users": users,
        "routes": routes,
        "shops": shops,
    }


def login(client, username: str, territory_id: int, password: str = SEED_PASSWORD):
    """Helper to sign a test client in; returns the response."""
    return client.post('/login', data={
        'username': username,
        'password': password,
        'territoryId': str(territory_id),
    })


def territory_id(seed, name: str) -> int:
    return seed["territories"][name].id


@pytest.fixture(scope='function')
def admin_client(app, seed):
    client = app.test_client()
    response = login(client, "admin", territory_id(seed, "Habaraduwa"))
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def viewer_client(app, seed):
    client = app.test_client()
    response = login(client, "viewer", territory_id(seed, "Habaraduwa"))
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def rep_client(app, seed):
    """rep1, bound to Lorry 1 in Habaraduwa."""
    client = app.test_client()
    response = login(client, "rep1", territory_id(seed, "Habaraduwa"))
    assert response.status_code == 200
    return client
