"""
Tests for costbook_config.

Verifies:
- packaged defaults load into typed module configs
- resolution order: explicit path, COSTBOOK_CONFIG, defaults
- COSTBOOK_DATABASE_URL override
- deterministic checksum
"""

from decimal import Decimal

import pytest
import yaml

from costbook_config import compute_checksum, get_active_config
from costbook_config.loader import DEFAULTS_PATH, load_yaml_file, parse_settings
from costbook_modules.project.models import ProjectKind
from costbook_modules.project.classification import classify_project


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("COSTBOOK_CONFIG", raising=False)
    monkeypatch.delenv("COSTBOOK_DATABASE_URL", raising=False)


def _write(tmp_path, data) -> str:
    path = tmp_path / "costbook.yaml"
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return str(path)


class TestDefaults:
    def test_packaged_defaults(self):
        settings = get_active_config()

        assert settings.config_id == "costbook-defaults"
        assert settings.currency == "JPY"
        assert settings.fiscal.default_settlement_month == 3
        assert settings.ledger.allow_negative_balances is True
        assert settings.forecast.minimum_cash_threshold == Decimal("0")
        assert settings.revenue.classification.overhead_name_markers == ("一般管理費", "その他経費")

    def test_default_classification_matches_built_in_rules(self):
        rules = get_active_config().classification
        assert classify_project("C-1", "x", rules) is ProjectKind.SUBSCRIPTION
        assert classify_project("IP", "x", rules) is ProjectKind.OVERHEAD

    def test_trace_logged(self, captured_logs):
        settings = get_active_config()
        records = [r for r in captured_logs() if r["message"] == "COSTBOOK_CONFIG_TRACE"]
        assert records[0]["config_checksum"] == settings.checksum


class TestResolution:
    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, {"config_id": "explicit", "database_url": "sqlite://"})
        assert get_active_config(path).config_id == "explicit"

    def test_environment_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"config_id": "from-env", "database_url": "sqlite://"})
        monkeypatch.setenv("COSTBOOK_CONFIG", path)
        assert get_active_config().config_id == "from-env"

    def test_database_url_override(self, monkeypatch):
        monkeypatch.setenv("COSTBOOK_DATABASE_URL", "postgresql://u:p@db/costbook")
        assert get_active_config().database_url == "postgresql://u:p@db/costbook"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestParsing:
    def test_top_level_currency_flows_into_sections(self):
        settings = parse_settings(
            {"config_id": "usd", "database_url": "sqlite://", "currency": "USD"}
        )
        assert settings.fiscal.currency == "USD"
        assert settings.forecast.currency == "USD"

    def test_invalid_section_value(self):
        with pytest.raises(ValueError):
            parse_settings(
                {
                    "config_id": "bad",
                    "database_url": "sqlite://",
                    "fiscal": {"default_settlement_month": 13},
                }
            )

    def test_missing_required_key(self):
        with pytest.raises(KeyError):
            parse_settings({"database_url": "sqlite://"})

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_yaml_file(path)


class TestChecksum:
    def test_deterministic_and_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_changes_with_content(self):
        data = load_yaml_file(DEFAULTS_PATH)
        changed = dict(data, version=data["version"] + 1)
        assert compute_checksum(data) != compute_checksum(changed)
