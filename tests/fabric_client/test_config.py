"""Tests for fabric_client.config."""

import logging
from pathlib import Path

import pytest
from fabric_client.config import DEFAULT_CONNECT_TIMEOUT, OrgConfig, get_env, load_config
from fabric_client.errors import ConfigLoadError


class TestGetEnv:
    """get_env prefers the environment and passes the fallback through untouched."""

    def test_present_key_returns_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ORG_NAME", "Org1")
        assert get_env("ORG_NAME", "fallback") == "Org1"

    def test_empty_value_still_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ORG_NAME", "")
        assert get_env("ORG_NAME", "fallback") == ""

    def test_absent_key_returns_fallback(self) -> None:
        assert get_env("ORG_NAME", "fallback") == "fallback"

    def test_fallback_is_not_coerced(self) -> None:
        sentinel = object()
        assert get_env("PORT", sentinel) is sentinel
        assert get_env("PORT", 3000) == 3000


class TestOrgConfigDefaults:
    """OrgConfig defaults."""

    def test_defaults(self) -> None:
        cfg = OrgConfig()
        assert cfg.org_name == ""
        assert cfg.peer_endpoint == ""
        assert cfg.connect_timeout == DEFAULT_CONNECT_TIMEOUT

    def test_frozen(self) -> None:
        cfg = OrgConfig()
        with pytest.raises(AttributeError):
            cfg.org_name = "Org2"  # type: ignore[misc]


class TestLoadConfig:
    """load_config reads the env file and the environment."""

    def test_reads_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "PORT=3000\n"
            "ORG_NAME=Org1\n"
            "CRYPTO_PATH=/crypto\n"
            "CERT_PATH=/crypto/cert.pem\n"
            "KEY_PATH=/crypto/keystore\n"
            "TLS_CERT_PATH=/crypto/ca.crt\n"
            "PEER_ENDPOINT=localhost:7051\n"
            "GATEWAY_PEER=peer0.org1.example.com\n"
        )

        cfg = load_config(env_file)

        assert cfg == OrgConfig(
            port="3000",
            org_name="Org1",
            msp_id="Org1MSP",
            crypto_path="/crypto",
            cert_path="/crypto/cert.pem",
            key_path="/crypto/keystore",
            tls_cert_path="/crypto/ca.crt",
            peer_endpoint="localhost:7051",
            gateway_peer="peer0.org1.example.com",
        )

    def test_environment_overrides_env_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ORG_NAME=Org1\nPEER_ENDPOINT=localhost:7051\n")
        monkeypatch.setenv("PEER_ENDPOINT", "peer.example.com:9051")

        cfg = load_config(env_file)

        assert cfg.org_name == "Org1"
        assert cfg.peer_endpoint == "peer.example.com:9051"

    def test_unset_values_fall_back_to_empty(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("# nothing configured\n")

        cfg = load_config(env_file)

        assert cfg.org_name == ""
        assert cfg.msp_id == ""
        assert cfg.cert_path == ""
        assert cfg.gateway_peer == ""

    def test_explicit_msp_id(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ORG_NAME=Org1\nMSP_ID=CustomMSP\n")

        assert load_config(env_file).msp_id == "CustomMSP"

    def test_default_path_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".env").write_text("ORG_NAME=Org2\n")
        monkeypatch.chdir(tmp_path)

        assert load_config().org_name == "Org2"

    def test_missing_env_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="does not exist"):
            load_config(tmp_path / "missing.env")

    def test_connect_timeout_from_env(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CONNECT_TIMEOUT=2.5\n")

        assert load_config(env_file).connect_timeout == 2.5

    def test_connect_timeout_invalid_raises(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CONNECT_TIMEOUT=soon\n")

        with pytest.raises(ConfigLoadError, match="must be a number"):
            load_config(env_file)

    def test_non_utf8_env_file_raises(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_bytes(b"ORG_NAME=\xff\xfe\n")

        with pytest.raises(ConfigLoadError, match="Error loading env file"):
            load_config(env_file)

    @pytest.mark.parametrize("raw", ["inf", "nan", "0", "-5"])
    def test_connect_timeout_must_be_positive_finite(self, tmp_path: Path, raw: str) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(f"CONNECT_TIMEOUT={raw}\n")

        with pytest.raises(ConfigLoadError, match="positive finite number"):
            load_config(env_file)

    def test_logs_org_name_after_loading(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ORG_NAME=Org1\n")

        with caplog.at_level(logging.INFO, logger="fabric_client.config"):
            load_config(env_file)

        assert "Initializing connection for Org1" in caplog.text
