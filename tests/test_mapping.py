# tests/test_mapping.py
"""Pruebas del mapeo de campos externos a claves de almacenamiento."""

import json
from datetime import datetime, timezone

import pytest

from catalog_core.errors import NoValidFieldsError
from catalog_core.mapping import (
    DOCUMENT_GAME_FIELDS,
    SQL_GAME_FIELDS,
    USER_FIELDS,
    build_record,
    build_update_pairs,
    record_from_storage,
)
from catalog_core.security import verify_password

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_single_field_produces_one_pair_plus_timestamp():
    pairs = build_update_pairs({"price": 10}, SQL_GAME_FIELDS, "updated_at", now=NOW)
    assert pairs == [("price", 10), ("updated_at", NOW)]


def test_unknown_fields_raise_no_valid_fields():
    with pytest.raises(NoValidFieldsError):
        build_update_pairs({"unknownField": 1}, SQL_GAME_FIELDS, "updated_at", now=NOW)


def test_camel_case_fields_map_to_columns():
    pairs = build_update_pairs(
        {"releaseDate": "2020-01-01", "originalPrice": 30, "title": "Celeste"},
        SQL_GAME_FIELDS,
        "updated_at",
        now=NOW,
    )
    # El orden es el de la tabla, no el del payload
    assert [key for key, _ in pairs] == ["title", "original_price", "release_date", "updated_at"]


def test_structured_fields_are_serialized_as_json_text(valid_game):
    pairs = dict(build_update_pairs(
        {"platform": valid_game["platform"], "requirements": valid_game["requirements"], "features": []},
        SQL_GAME_FIELDS,
        "updated_at",
        now=NOW,
    ))
    assert pairs["platform"] == '["PC","Switch"]'
    assert json.loads(pairs["requirements"]) == valid_game["requirements"]
    assert pairs["features"] == "[]"


def test_document_fields_keep_native_structures(valid_game):
    pairs = dict(build_update_pairs({"platform": ["PS5"], "releaseDate": "2023-10-20"}, DOCUMENT_GAME_FIELDS, "updatedAt", now=NOW))
    assert pairs == {"platform": ["PS5"], "releaseDate": "2023-10-20", "updatedAt": NOW}


def test_without_touched_key_no_timestamp_is_added():
    assert build_update_pairs({"nombre": "Luis"}, USER_FIELDS) == [("nombre", "Luis")]


def test_password_is_hashed_into_password_hash():
    pairs = dict(build_update_pairs({"password": "secreto123"}, USER_FIELDS))
    assert "password" not in pairs
    assert pairs["password_hash"] != "secreto123"
    assert verify_password("secreto123", pairs["password_hash"])


def test_build_record_drops_unknown_keys(valid_game):
    valid_game["id"] = 99
    valid_game["hacker"] = True
    record = build_record(valid_game, SQL_GAME_FIELDS)
    assert "id" not in record and "hacker" not in record
    assert len(record) == 14
    assert record["original_price"] == 19.99


def test_record_from_storage_restores_external_shape(valid_game):
    stored = build_record(valid_game, SQL_GAME_FIELDS)
    assert record_from_storage(stored, SQL_GAME_FIELDS) == valid_game


def test_record_from_storage_hides_password_hash():
    stored = {"nombre": "Ana", "email": "ana@example.com", "password_hash": "$2b$12$abc"}
    assert record_from_storage(stored, USER_FIELDS) == {"nombre": "Ana", "email": "ana@example.com"}
