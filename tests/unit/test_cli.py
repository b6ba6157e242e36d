"""Tests for the lunarconsole command-line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner

from lunarconsole import __version__, cli as cli_module
from lunarconsole.cli import cli
from lunarconsole.infrastructure.api.http_client import HttpBackendApi

PRODUCTS = {
    "name": "products",
    "schema": {
        "fields": [
            {"name": "id", "field_type": "number", "required": True},
            {"name": "price", "field_type": "number", "required": True},
            {"name": "label", "field_type": "text"},
        ]
    },
}


@pytest.fixture
def runner():
    return CliRunner()


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def backend_returning(monkeypatch, response):
    def factory(settings):
        return HttpBackendApi(settings, transport=httpx.MockTransport(lambda request: response))

    monkeypatch.setattr(cli_module, "HttpBackendApi", factory)


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_validate_record_prints_normalized_data(runner, tmp_path):
    schema_file = write_json(tmp_path / "products.json", PRODUCTS)
    data_file = write_json(tmp_path / "record.json", {"price": "12.5", "label": "Tea"})

    result = runner.invoke(cli, ["validate-record", schema_file, data_file])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"price": 12.5, "label": "Tea"}


def test_validate_record_accepts_bare_field_list(runner, tmp_path):
    schema_file = write_json(tmp_path / "fields.json", PRODUCTS["schema"]["fields"])
    data_file = write_json(tmp_path / "record.json", {"price": 3})

    result = runner.invoke(cli, ["validate-record", schema_file, data_file])

    assert result.exit_code == 0


def test_validate_record_lists_invalid_fields(runner, tmp_path):
    schema_file = write_json(tmp_path / "products.json", PRODUCTS)
    data_file = write_json(tmp_path / "record.json", {"price": ""})

    result = runner.invoke(cli, ["validate-record", schema_file, data_file])

    assert result.exit_code == 1
    assert "price:" in result.output
    assert "(RequiredFieldMissing)" in result.output


def test_validate_record_partial(runner, tmp_path):
    schema_file = write_json(tmp_path / "products.json", PRODUCTS)
    data_file = write_json(tmp_path / "record.json", {"label": "Coffee"})

    result = runner.invoke(cli, ["validate-record", "--partial", schema_file, data_file])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"label": "Coffee"}


def test_validate_record_rejects_malformed_json(runner, tmp_path):
    schema_file = tmp_path / "broken.json"
    schema_file.write_text("{not json", encoding="utf-8")
    data_file = write_json(tmp_path / "record.json", {})

    result = runner.invoke(cli, ["validate-record", str(schema_file), data_file])

    assert result.exit_code == 2
    assert "is not valid JSON" in result.output


def test_validate_collection_ok(runner, tmp_path):
    collection_file = write_json(tmp_path / "products.json", PRODUCTS)

    result = runner.invoke(cli, ["validate-collection", collection_file])

    assert result.exit_code == 0
    assert "Collection 'products' is valid." in result.output


def test_validate_collection_reserved_name(runner, tmp_path):
    collection_file = write_json(tmp_path / "users.json", {**PRODUCTS, "name": "users"})

    result = runner.invoke(cli, ["validate-collection", collection_file])

    assert result.exit_code == 1
    assert "name: Collection name 'users' is reserved" in result.output


def test_collections_lists_backend_collections(runner, monkeypatch):
    body = {"success": True, "data": [{"id": 1, **PRODUCTS}, {"id": 2, "name": "audit", "is_system": True}]}
    backend_returning(monkeypatch, httpx.Response(200, json=body))

    result = runner.invoke(cli, ["collections"])

    assert result.exit_code == 0
    assert "products: price, label" in result.output
    assert "audit (system): " in result.output


def test_collections_empty(runner, monkeypatch):
    backend_returning(monkeypatch, httpx.Response(200, json={"success": True, "data": []}))

    result = runner.invoke(cli, ["collections"])

    assert result.exit_code == 0
    assert "No collections." in result.output


def test_collections_backend_error(runner, monkeypatch):
    backend_returning(monkeypatch, httpx.Response(401, json={"error": "Invalid token"}))

    result = runner.invoke(cli, ["collections"])

    assert result.exit_code == 1
    assert "Error: Invalid token" in result.output


def test_info_shows_configuration(runner, monkeypatch):
    monkeypatch.setenv("LUNARCONSOLE_API_BASE_URL", "https://lunar.example.com/api/")

    result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "https://lunar.example.com/api" in result.output
    assert "Token:        not set" in result.output
