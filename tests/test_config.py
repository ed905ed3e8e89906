#!/usr/bin/env python
# -*- encoding: utf-8 -*-
"""
Tests for config file parsing, connection parameter discovery and the
get_webdav_provider factory.  No test talks to a server.
"""
import json
from unittest import mock
from unittest.mock import AsyncMock

import pytest

from cloudaccess import config
from cloudaccess.lib import error
from cloudaccess.webdav import get_webdav_provider
from cloudaccess.webdav import WebDAVClient
from cloudaccess.webdav import WebDAVProvider

ENV_VARS = (
    "CLOUDACCESS_WEBDAV_URL",
    "CLOUDACCESS_WEBDAV_USERNAME",
    "CLOUDACCESS_WEBDAV_PASSWORD",
    "CLOUDACCESS_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    ## keep the user's own config files out of the tests
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def config_file(tmp_path):
    fn = tmp_path / "cloudaccess.conf"
    fn.write_text(
        json.dumps(
            {
                "default": {
                    "url": "https://cloud.example.com/dav/",
                    "username": "alice",
                    "password": "secret",
                },
                "work": {"inherits": "default", "username": "alice.work"},
                "odd": {"url": "https://odd.example.com/", "contains": ["work"]},
            }
        )
    )
    return str(fn)


class TestConfigSection:
    def test_inherits(self) -> None:
        cfg = {"a": {"x": 1, "y": 2}, "b": {"inherits": "a", "y": 3}}
        assert config.config_section(cfg, "b") == {"x": 1, "y": 3}

    def test_missing_section(self) -> None:
        assert config.config_section({}, "default") == {}


class TestReadConfig:
    def test_json(self, config_file) -> None:
        cfg = config.read_config(config_file)
        assert cfg["default"]["username"] == "alice"

    def test_missing_file(self, tmp_path) -> None:
        assert config.read_config(str(tmp_path / "nope.conf")) == {}

    def test_default_location(self, tmp_path, config_file) -> None:
        cfgdir = tmp_path / "home" / ".config" / "cloudaccess"
        cfgdir.mkdir(parents=True)
        (cfgdir / "cloudaccess.conf").write_text(open(config_file).read())

        assert config.read_config(None)["default"]["password"] == "secret"

    def test_no_default_config(self) -> None:
        assert config.read_config(None) == {}

    def test_yaml(self, tmp_path) -> None:
        pytest.importorskip("yaml")
        fn = tmp_path / "cloudaccess.yaml"
        fn.write_text("default:\n  url: https://cloud.example.com/dav/\n  username: bob\n")

        assert config.read_config(str(fn))["default"]["username"] == "bob"

    def test_broken_file_is_ignored(self, tmp_path, caplog) -> None:
        fn = tmp_path / "cloudaccess.conf"
        fn.write_text("{not: [valid")

        assert config.read_config(str(fn)) == {}
        assert str(fn) in caplog.text


class TestGetConnectionParams:
    def test_nothing_configured(self) -> None:
        assert config.get_connection_params() is None

    def test_explicit(self) -> None:
        params = config.get_connection_params(url="https://cloud.example.com/dav/", username=None)
        assert params == {"base_url": "https://cloud.example.com/dav/"}

    def test_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("CLOUDACCESS_WEBDAV_URL", "https://env.example.com/dav/")
        monkeypatch.setenv("CLOUDACCESS_WEBDAV_USERNAME", "carol")

        params = config.get_connection_params()

        assert params["base_url"] == "https://env.example.com/dav/"
        assert params["username"] == "carol"

    def test_precedence(self, monkeypatch, config_file) -> None:
        monkeypatch.setenv("CLOUDACCESS_CONFIG_FILE", config_file)
        monkeypatch.setenv("CLOUDACCESS_WEBDAV_USERNAME", "carol")

        params = config.get_connection_params(password="explicit")

        assert params["base_url"] == "https://cloud.example.com/dav/"
        assert params["username"] == "carol"
        assert params["password"] == "explicit"

    def test_config_section(self, config_file) -> None:
        params = config.get_connection_params(
            config_file=config_file, config_section_name="work"
        )
        assert params["username"] == "alice.work"
        assert params["password"] == "secret"


class TestGetWebDAVCredential:
    def test_credential(self, config_file) -> None:
        credential = config.get_webdav_credential(config_file=config_file)
        assert credential.base_url == "https://cloud.example.com/dav/"
        assert credential.username == "alice"
        assert credential.auth_type == "basic"

    def test_unknown_keys_are_ignored(self, config_file) -> None:
        credential = config.get_webdav_credential(
            config_file=config_file, config_section_name="odd"
        )
        assert credential.base_url == "https://odd.example.com/"

    def test_none_without_url(self) -> None:
        assert config.get_webdav_credential() is None


class TestGetWebDAVProvider:
    @pytest.mark.asyncio
    async def test_requires_url(self) -> None:
        with pytest.raises(ValueError):
            await get_webdav_provider()

    @pytest.mark.asyncio
    async def test_without_probe(self) -> None:
        provider = await get_webdav_provider(
            url="https://cloud.example.com/dav/", username="alice", password="secret", probe=False
        )
        try:
            assert isinstance(provider, WebDAVProvider)
            assert str(provider.client.url) == "https://cloud.example.com/dav/"
            assert provider.client.credential.username == "alice"
        finally:
            await provider.close()

    @pytest.mark.asyncio
    async def test_probe(self) -> None:
        with mock.patch.object(WebDAVClient, "check_connection", new=AsyncMock()) as probe:
            provider = await get_webdav_provider(url="https://cloud.example.com/dav/")
            await provider.close()

        probe.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_probe_closes_client(self) -> None:
        failure = error.NotConnectedError(url="https://cloud.example.com/dav/", reason="offline")
        with mock.patch.object(
            WebDAVClient, "check_connection", new=AsyncMock(side_effect=failure)
        ), mock.patch.object(WebDAVClient, "close", new=AsyncMock()) as close:
            with pytest.raises(error.NotConnectedError):
                await get_webdav_provider(url="https://cloud.example.com/dav/")

        close.assert_called_once()
