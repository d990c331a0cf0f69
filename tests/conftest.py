# tests/conftest.py
import copy

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from document_service import main as document_main
from document_service.db import get_db as document_get_db
from sql_service import main as sql_main
from sql_service.db import Base, get_db as sql_get_db

VALID_GAME = {
    "title": "Hollow Knight",
    "price": 14.99,
    "originalPrice": 19.99,
    "discount": 25,
    "image": "https://cdn.example.com/hollow-knight.jpg",
    "category": "Metroidvania",
    "platform": ["PC", "Switch"],
    "rating": 4.8,
    "description": "Explora un reino subterráneo en ruinas.",
    "requirements": {
        "os": "Windows 10",
        "processor": "Intel Core 2 Duo E5200",
        "memory": "4 GB RAM",
        "graphics": "GeForce 9800GTX+",
        "storage": "9 GB",
    },
    "features": ["Un jugador", "Soporte para mando"],
    "releaseDate": "2017-02-24",
    "publisher": "Team Cherry",
    "featured": True,
}

VALID_USER = {"nombre": "Ana Torres", "email": "ana@example.com", "password": "secreto123"}


@pytest.fixture
def valid_game():
    return copy.deepcopy(VALID_GAME)


@pytest.fixture
def valid_user():
    return dict(VALID_USER)


# --- Variante MySQL: SQLite en memoria en lugar del servidor ---

@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_client(sql_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sql_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    sql_main.app.dependency_overrides[sql_get_db] = override_get_db
    yield TestClient(sql_main.app)
    sql_main.app.dependency_overrides.clear()


# --- Variante documental: colecciones en memoria ---

class FakeResult:
    def __init__(self, inserted_id=None, deleted_count=0):
        self.inserted_id = inserted_id
        self.deleted_count = deleted_count


class FakeCollection:
    """Subconjunto de pymongo.collection.Collection usado por los repositorios."""

    def __init__(self, unique_fields=()):
        self.docs = {}
        self.unique_fields = unique_fields

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(key) == value for key, value in (query or {}).items())

    def _check_unique(self, doc, ignore_id=None):
        for field in self.unique_fields:
            for other in self.docs.values():
                if other["_id"] != ignore_id and field in doc and other.get(field) == doc[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error: {field}")

    def find(self, query=None):
        return [copy.deepcopy(doc) for doc in self.docs.values() if self._matches(doc, query)]

    def find_one(self, query):
        for doc in self.docs.values():
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def insert_one(self, doc):
        self._check_unique(doc)
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return FakeResult(inserted_id=doc["_id"])

    def find_one_and_update(self, query, update, return_document=None):
        for doc in self.docs.values():
            if self._matches(doc, query):
                self._check_unique(update["$set"], ignore_id=doc["_id"])
                doc.update(copy.deepcopy(update["$set"]))
                return copy.deepcopy(doc)
        return None

    def delete_one(self, query):
        for key, doc in list(self.docs.items()):
            if self._matches(doc, query):
                del self.docs[key]
                return FakeResult(deleted_count=1)
        return FakeResult(deleted_count=0)

    def create_index(self, keys, unique=False):
        return "_".join(f"{field}_{direction}" for field, direction in keys)


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            unique = ("email",) if name == "usuarios" else ()
            self.collections[name] = FakeCollection(unique_fields=unique)
        return self.collections[name]


@pytest.fixture
def fake_mongo():
    return FakeDatabase()


@pytest.fixture
def document_client(fake_mongo):
    document_main.app.dependency_overrides[document_get_db] = lambda: fake_mongo
    yield TestClient(document_main.app)
    document_main.app.dependency_overrides.clear()
