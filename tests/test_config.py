"""Tests for u64_remote.config - credentials, settings and validation."""

from __future__ import annotations

import json

import pytest

from u64_remote.config.parser import (
    find_credentials,
    load_credentials,
    load_settings,
    parse_settings_data,
)
from u64_remote.config.schema import Credentials, Settings, normalize_address
from u64_remote.config.validator import validate_settings


def _write_creds(path, **fields):
    path.write_text(json.dumps(fields))
    return path


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestLoadCredentials:
    def test_bare_ip_gets_http_scheme(self, tmp_path):
        path = _write_creds(tmp_path / "creds.json", address="10.0.0.5", password="pw")
        creds = load_credentials(path)
        assert creds.address == "http://10.0.0.5"
        assert creds.password == "pw"

    def test_https_address_is_kept(self, tmp_path):
        path = _write_creds(tmp_path / "creds.json", address="https://c64u.example/")
        assert load_credentials(path).address == "https://c64u.example"

    def test_message_box_flag(self, tmp_path):
        path = _write_creds(tmp_path / "creds.json", address="10.0.0.5", enableMessageBox=True)
        assert load_credentials(path).enable_message_box is True

    def test_incomplete_record_uses_defaults(self, tmp_path):
        path = _write_creds(tmp_path / "creds.json", password="pw")
        assert load_credentials(path) == Credentials(address="", password="pw")

    def test_wrong_types_are_ignored(self, tmp_path):
        path = _write_creds(tmp_path / "creds.json", address=5, password=None, enableMessageBox="yes")
        assert load_credentials(path) == Credentials()

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text('{"address": ')
        with pytest.raises(ValueError, match="Malformed credentials"):
            load_credentials(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text('["10.0.0.5"]')
        with pytest.raises(ValueError, match="JSON object"):
            load_credentials(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_credentials(tmp_path / "missing.json")


class TestFindCredentials:
    def test_explicit_path(self, tmp_path):
        path = _write_creds(tmp_path / "mine.json", address="10.0.0.9")
        assert find_credentials(path).address == "http://10.0.0.9"

    def test_explicit_path_failure_is_fatal(self, tmp_path):
        with pytest.raises(RuntimeError, match="Failed to load creds from"):
            find_credentials(tmp_path / "missing.json")

    def test_searches_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        _write_creds(tmp_path / "creds.json", address="10.0.0.5")
        assert find_credentials().address == "http://10.0.0.5"

    def test_falls_back_to_json_examples(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "json_examples").mkdir()
        _write_creds(tmp_path / "json_examples" / "creds.json", address="10.0.0.6")
        assert find_credentials().address == "http://10.0.0.6"

    def test_skips_broken_candidates(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "creds.json").write_text("not json")
        (tmp_path / "json_examples").mkdir()
        _write_creds(tmp_path / "json_examples" / "creds.json", address="10.0.0.6")
        assert find_credentials().address == "http://10.0.0.6"

    def test_nothing_found_gives_empty_credentials(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert find_credentials() == Credentials()


class TestNormalizeAddress:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("10.0.0.5", "http://10.0.0.5"),
            ("http://10.0.0.5/", "http://10.0.0.5"),
            ("https://u64.lan", "https://u64.lan"),
            ("  u64.local ", "http://u64.local"),
            ("", ""),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_address(raw) == expected

    def test_with_address_returns_copy(self):
        creds = Credentials(address="10.0.0.5", password="pw")
        moved = creds.with_address("10.0.0.6")
        assert moved.address == "http://10.0.0.6"
        assert moved.password == "pw"
        assert creds.address == "http://10.0.0.5"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_defaults_when_default_file_missing(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.discovery.mdns_timeout_ms == 800
        assert settings.discovery.probe_timeout_ms == 250
        assert settings.discovery.max_hosts_per_interface == 512
        assert settings.discovery.service_type == "_http._tcp.local."

    def test_reads_default_location(self, isolated_config_dir):
        isolated_config_dir.mkdir(parents=True)
        (isolated_config_dir / "config.yaml").write_text("discovery:\n  mdns_timeout_ms: 1200\n")
        assert load_settings().discovery.mdns_timeout_ms == 1200

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "discovery:\n"
            "  probe_timeout_ms: 100\n"
            "  max_hosts_per_interface: 64\n"
            "  unknown_key: ignored\n"
            "http:\n"
            "  max_retries: 0\n"
        )
        settings = load_settings(path)
        assert settings.discovery.probe_timeout_ms == 100
        assert settings.discovery.max_hosts_per_interface == 64
        assert settings.http.max_retries == 0
        assert settings.source == str(path)

    def test_explicit_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path).discovery == Settings().discovery

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("discovery: [unclosed\n")
        with pytest.raises(ValueError, match="Malformed settings"):
            load_settings(path)

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="'http' must be a mapping"):
            parse_settings_data({"http": [1, 2]})


class TestValidateSettings:
    def test_defaults_are_valid(self):
        result = validate_settings(Settings())
        assert result.valid
        assert result.errors == []

    def test_bad_values(self):
        settings = parse_settings_data({
            "discovery": {
                "mdns_timeout_ms": 0,
                "max_hosts_per_interface": -5,
                "service_type": "_http._tcp",
            },
            "http": {"request_timeout": "fast", "max_retries": -1},
        })
        result = validate_settings(settings)

        assert not result.valid
        paths = {e.path for e in result.errors}
        assert paths == {
            "discovery.mdns_timeout_ms",
            "discovery.max_hosts_per_interface",
            "discovery.service_type",
            "http.request_timeout",
            "http.max_retries",
        }
        assert str(result).startswith("Invalid settings: discovery.mdns_timeout_ms: ")

    def test_huge_cap_is_rejected(self):
        settings = parse_settings_data({"discovery": {"max_hosts_per_interface": 70000}})
        assert not validate_settings(settings).valid

    def test_slow_scan_warns(self):
        settings = parse_settings_data({"discovery": {"max_hosts_per_interface": 65000, "probe_timeout_ms": 250}})
        result = validate_settings(settings)
        assert result.valid
        assert len(result.warnings) == 1
        assert str(result) == "Valid"
