from __future__ import annotations

import os

import pytest

from app import config
from app.config import get_ingestion_settings, load_env_files, resolve_environment_name

_ENV_NAMES = (
    "DEPLOY_ENVIRONMENT",
    "ELK_URL",
    "LIVE_ELK_URL",
    "DEV_ELK_URL",
    "BULK_LIMIT",
    "LIVE_BULK_LIMIT",
    "DEBUG",
    "AWS_S3_ACCESS_KEY_ID",
    "AWS_S3_SECRET_ACCESS_KEY",
    "ELK_DOCUMENT_TYPE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_env_files", lambda: None)
    config._load_env_once.cache_clear()
    get_ingestion_settings.cache_clear()
    yield
    get_ingestion_settings.cache_clear()


class TestResolveEnvironmentName:
    def test_alias_selects_environment(self) -> None:
        arn = "arn:aws:lambda:eu-west-1:123456789012:function:elb-logs:live"
        assert resolve_environment_name(arn) == "LIVE"

    def test_unqualified_arn_falls_back_to_deploy_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DEPLOY_ENVIRONMENT", "dev")
        arn = "arn:aws:lambda:eu-west-1:123456789012:function:elb-logs"
        assert resolve_environment_name(arn) == "DEV"

    def test_defaults_to_local(self) -> None:
        assert resolve_environment_name(None) == "LOCAL"

    def test_unknown_deploy_environment_is_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("DEPLOY_ENVIRONMENT", "staging")
        with pytest.raises(RuntimeError):
            resolve_environment_name(None)


class TestIngestionSettings:
    def test_local_defaults(self) -> None:
        settings = get_ingestion_settings("LOCAL")

        assert settings.debug is True
        assert settings.elk_url == "http://127.0.0.1:9200"
        assert settings.bulk_limit == 6000
        assert settings.region == "eu-west-1"
        assert settings.document_type == "elblog"
        assert not settings.has_static_credentials

    def test_live_requires_elk_url(self) -> None:
        with pytest.raises(RuntimeError):
            get_ingestion_settings("LIVE")

    def test_environment_specific_value_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("ELK_URL", "http://shared:9200")
        monkeypatch.setenv("LIVE_ELK_URL", "http://live:9200/")
        monkeypatch.setenv("BULK_LIMIT", "500")

        settings = get_ingestion_settings("live")

        assert settings.environment == "LIVE"
        assert settings.elk_url == "http://live:9200"
        assert settings.bulk_limit == 500
        assert settings.debug is False

    def test_invalid_numbers_fall_back_to_defaults(self, monkeypatch) -> None:
        monkeypatch.setenv("BULK_LIMIT", "lots")
        assert get_ingestion_settings("LOCAL").bulk_limit == 6000

    def test_static_credentials_need_both_parts(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_S3_ACCESS_KEY_ID", "AKIAEXAMPLE")
        assert not get_ingestion_settings("LOCAL").has_static_credentials

        get_ingestion_settings.cache_clear()
        monkeypatch.setenv("AWS_S3_SECRET_ACCESS_KEY", "secret")
        assert get_ingestion_settings("LOCAL").has_static_credentials

    def test_document_type_can_be_disabled(self, monkeypatch) -> None:
        monkeypatch.setenv("ELK_DOCUMENT_TYPE", "none")
        assert get_ingestion_settings("LOCAL").document_type == ""

    def test_unknown_environment_is_rejected(self) -> None:
        with pytest.raises(RuntimeError):
            get_ingestion_settings("QA")


class TestLoadEnvFiles:
    def test_reads_pairs_without_overriding_process_env(self, tmp_path, monkeypatch) -> None:
        (tmp_path / ".env").write_text(
            "# local cluster\n"
            "ELK_URL='http://es.local:9200'\n"
            "export BULK_LIMIT=250\n"
            "DEBUG=false\n"
            "not a pair\n"
            "=orphan\n",
            encoding="utf-8",
        )
        (tmp_path / ".env.local").write_text('BULK_LIMIT="999"\nELK_DOCUMENT_TYPE=none\n', encoding="utf-8")
        for name in ("ELK_URL", "BULK_LIMIT", "ELK_DOCUMENT_TYPE"):
            # Registers the unset state so teardown removes what the loader writes.
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        monkeypatch.setenv("DEBUG", "true")

        load_env_files(tmp_path)

        assert os.environ["ELK_URL"] == "http://es.local:9200"
        assert os.environ["BULK_LIMIT"] == "250"
        assert os.environ["DEBUG"] == "true"
        assert os.environ["ELK_DOCUMENT_TYPE"] == "none"

    def test_missing_files_are_ignored(self, tmp_path) -> None:
        load_env_files(tmp_path)
