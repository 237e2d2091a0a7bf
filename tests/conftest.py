import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("TOKEN_SECRET", "test-secret")

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import get_db
from main import app
from schemas import Category, Genre


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["cinemadb"]
    db["genres"].insert_many([
        Genre(name="Drama", description="Serious stories").model_dump(),
        Genre(name="Science Fiction", description="Space and time").model_dump(),
    ])
    db["categories"].insert_many([
        Category(name="Classic").model_dump(),
        Category(name="Award Winner", since=1929).model_dump(),
    ])
    return db


@pytest.fixture
def client(mongo_db):
    app.dependency_overrides[get_db] = lambda: mongo_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def movie_payload():
    return {
        "title": "The Long Night",
        "genre": "Drama",
        "duration": 128,
        "releaseYear": 1999,
        "rating": 8.2,
        "cast": [{"name": "Ada Brooks", "role": "Lead"}, {"name": "Sam Hale"}],
        "reviews": [{"user": "kim", "text": "Great", "date": "2024-01-05T00:00:00Z"}],
        "categories": ["Classic", "Unknown Category"],
    }
