import pytest
from fastapi.testclient import TestClient

from catalog_api.config import Settings
from catalog_api.database import open_database
from catalog_api.main import create_app
from catalog_api.schemas.box_office import UpstreamBoxOffice
from catalog_api.services.boxoffice_service import BoxOfficeNotFound
from catalog_api.utils.dependencies import get_box_office_client

AUTH_TOKEN = "test-token"


class FakeBoxOfficeClient:
    """
    Stands in for the upstream API.
    records maps title -> upstream JSON dict, or an exception to raise.
    Unknown titles answer like a 404.
    """

    def __init__(self, records=None):
        self.records = dict(records or {})
        self.calls = []

    def get_movie_box_office(self, title):
        self.calls.append(title)
        result = self.records.get(title)
        if result is None:
            raise BoxOfficeNotFound("boxoffice: upstream 404", 404)
        if isinstance(result, Exception):
            raise result
        return UpstreamBoxOffice.model_validate(result)


@pytest.fixture
def database():
    """Fresh in-memory database for each test."""
    db = open_database("sqlite://")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db_session(database):
    """Provide a database session for direct service calls and assertions."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def box_office():
    return FakeBoxOfficeClient()


@pytest.fixture
def client(database, box_office):
    """FastAPI test client sharing the test database, upstream replaced by a fake."""
    app = create_app(Settings(db_url="sqlite://", auth_token=AUTH_TOKEN), database=database)
    app.dependency_overrides[get_box_office_client] = lambda: box_office

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {AUTH_TOKEN}"}
