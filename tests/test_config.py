"""
Tests for configuration loading and participant resolution.
"""

from pathlib import Path

import pytest

from meetingfinder.config import AppConfig


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, tmp_path):
        path = _write(
            tmp_path,
            "client_id: abc\n"
            "tenant_id: def\n"
            "defaults:\n"
            "  duration_minutes: 45\n"
            "colleagues:\n"
            "  - name: alice\n"
            "    email: Alice@Example.com\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.has_graph_credentials
        assert config.defaults.duration_minutes == 45
        assert config.timezone == "Europe/Berlin"
        assert config.get_authority_url() == "https://login.microsoftonline.com/def"

    def test_credentials_are_optional(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, "timezone: UTC\n"))

        assert not config.has_graph_credentials

    def test_relative_events_file_is_resolved(self, tmp_path):
        config = AppConfig.load_from_yaml(_write(tmp_path, "events_file: termine.yaml\n"))

        assert config.events_file == tmp_path / "termine.yaml"

    def test_token_cache_defaults_to_keyring(self):
        config = AppConfig()

        assert config.token_cache == "keyring"
        assert config.token_cache_file is None

    def test_file_token_cache(self, tmp_path):
        config = AppConfig.load_from_yaml(
            _write(tmp_path, "token_cache: file\ntoken_cache_file: tokens.json\n")
        )

        assert config.token_cache == "file"
        assert config.token_cache_file == tmp_path / "tokens.json"

    def test_unknown_token_cache_rejected(self):
        with pytest.raises(ValueError, match="token_cache"):
            AppConfig(token_cache="memory")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(_write(tmp_path, "colleagues: [unclosed\n"))

    def test_non_mapping_root_raises(self, tmp_path):
        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(_write(tmp_path, "- a\n- b\n"))

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError, match="duration_minutes"):
            AppConfig(defaults={"duration_minutes": 0})

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_duplicate_colleagues_rejected(self):
        with pytest.raises(ValueError, match="Duplicate colleague name"):
            AppConfig(
                colleagues=[
                    {"name": "alice", "email": "a@example.com"},
                    {"name": "Alice", "email": "b@example.com"},
                ]
            )


class TestParticipantResolution:
    """Tests for resolving aliases and emails."""

    def setup_method(self):
        self.config = AppConfig(
            colleagues=[
                {"name": "alice", "email": "Alice@Example.com"},
                {"name": "bob", "email": "bob@example.com"},
            ]
        )

    def test_resolve_alias(self):
        assert self.config.resolve_participant("ALICE") == "alice@example.com"

    def test_resolve_email(self):
        assert self.config.resolve_participant("Dave@Example.com") == "dave@example.com"

    def test_resolve_unknown_alias_raises(self):
        with pytest.raises(ValueError, match="Unknown participant"):
            self.config.resolve_participant("mallory")

    def test_resolve_participants_deduplicates(self):
        emails = self.config.resolve_participants(["alice", "bob", "alice@example.com"])

        assert emails == ["alice@example.com", "bob@example.com"]

    def test_resolve_participants_reports_all_unknown(self):
        with pytest.raises(ValueError, match="mallory, trent"):
            self.config.resolve_participants(["trent", "alice", "mallory"])

    def test_resolve_no_participants(self):
        assert self.config.resolve_participants([]) == []
