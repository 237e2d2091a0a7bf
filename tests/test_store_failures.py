import pytest
from pymongo.errors import PyMongoError

from database import get_db
from main import app
from security import create_access_token


class BrokenCollection:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise PyMongoError("connection refused")
        return fail


class BrokenDatabase:
    def __getitem__(self, name):
        return BrokenCollection()


@pytest.fixture
def broken_client(client):
    app.dependency_overrides[get_db] = lambda: BrokenDatabase()
    return client


def test_list_movies(broken_client):
    resp = broken_client.get("/movies")
    assert resp.status_code == 500
    assert resp.content == b""


def test_search_movies(broken_client):
    resp = broken_client.get("/movies/search", params={"title": "night"})
    assert resp.status_code == 500
    assert resp.content == b""


def test_create_movie(broken_client, movie_payload):
    resp = broken_client.post("/movies", json=movie_payload)
    assert resp.status_code == 500
    assert resp.content == b""


def test_register(broken_client):
    resp = broken_client.post("/users", json={"email": "a@x.com", "password": "pw123456"})
    assert resp.status_code == 500
    assert resp.content == b""


def test_login(broken_client):
    resp = broken_client.post("/login", json={"email": "a@x.com", "password": "pw123456"})
    assert resp.status_code == 500
    assert resp.content == b""


def test_admin_listing_reports_server_error(broken_client):
    token = create_access_token("abc", "boss@x.com", "admin")
    resp = broken_client.get("/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Server error"}
