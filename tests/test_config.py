"""Tests for configuration loading and validation."""

from __future__ import annotations

import json
import logging

import pytest

from walletbridge.config.const import DEFAULT_NEM2_GENERATION_HASHES
from walletbridge.config.model import RuntimeConfig, parse_version
from walletbridge.config.settings import build_runtime_config, load_runtime_config

from .mocks import GENERATION_HASH


class TestRuntimeConfig:
    def test_defaults(self) -> None:
        config = RuntimeConfig()
        assert config.allowed_methods == ("*",)
        assert config.is_method_allowed("nemSignTransaction")
        assert config.nem_default_network == 0x68
        assert config.firmware is None
        assert config.generation_hash_for(0x68) == bytes.fromhex(DEFAULT_NEM2_GENERATION_HASHES["mainnet"])
        assert config.generation_hash_for(0x60) is None

    def test_generation_hashes_are_normalised(self) -> None:
        config = RuntimeConfig(nem2_generation_hashes={"mijin_test": GENERATION_HASH.lower()})
        assert config.nem2_generation_hashes == {"mijin_test": GENERATION_HASH}
        assert config.generation_hash_for(0x68) is None

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"nem2_generation_hashes": {"moon": GENERATION_HASH}}, "unknown network"),
            ({"nem2_generation_hashes": {"mainnet": "AB"}}, "64 hex characters"),
            ({"nem2_generation_hashes": {"mainnet": "ZZ" * 32}}, "not valid hex"),
            ({"nem_default_network": 0x90}, "not a NEM network"),
            ({"firmware_version": "2.x"}, "Invalid firmware version"),
            ({"firmware_model": "T"}, "Unknown firmware model"),
        ],
    )
    def test_invalid_values(self, kwargs, message) -> None:
        with pytest.raises(ValueError, match=message):
            RuntimeConfig(**kwargs)

    def test_empty_allow_list_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="walletbridge.config"):
            config = RuntimeConfig(allowed_methods=())
        assert not config.is_method_allowed("getPublicKey")
        assert "allowed_methods is empty" in caplog.text

    def test_firmware_tuple(self) -> None:
        config = RuntimeConfig(firmware_model="2", firmware_version="2.1.0")
        assert config.firmware == ("2", (2, 1, 0))


def test_parse_version() -> None:
    assert parse_version("1.6.2") == (1, 6, 2)
    assert parse_version(" 2 ") == (2,)
    with pytest.raises(ValueError):
        parse_version("1..2")


class TestSchema:
    def test_empty_mapping_gives_defaults(self) -> None:
        config = build_runtime_config({})
        assert config.allowed_methods == ("*",)
        assert config.nem2_generation_hashes == DEFAULT_NEM2_GENERATION_HASHES

    def test_values_are_loaded(self) -> None:
        config = build_runtime_config(
            {
                "debug_logging": True,
                "allowed_methods": ["nem*", "getPublicKey"],
                "nem_default_network": 0x98,
                "firmware_model": "2",
                "firmware_version": "2.1.0",
            }
        )
        assert config.debug_logging is True
        assert config.allowed_methods == ("nem*", "getPublicKey")
        assert config.nem_default_network == 0x98
        assert config.firmware == ("2", (2, 1, 0))

    @pytest.mark.parametrize(
        ("raw", "field"),
        [
            ({"nem_default_network": 0x90}, "nem_default_network"),
            ({"nem2_generation_hashes": {"moon": GENERATION_HASH}}, "nem2_generation_hashes"),
            ({"nem2_generation_hashes": {"mainnet": "G" * 64}}, "nem2_generation_hashes"),
            ({"firmware_version": "two"}, "firmware_version"),
            ({"firmware_model": "3"}, "firmware_model"),
            ({"allowed_methods": [""]}, "allowed_methods"),
            ({"surprise": 1}, "surprise"),
        ],
    )
    def test_invalid_values_name_the_field(self, raw, field) -> None:
        with pytest.raises(ValueError, match=field):
            build_runtime_config(raw)


class TestLoader:
    def test_missing_file_means_defaults(self, tmp_path) -> None:
        config = load_runtime_config(tmp_path / "absent.json")
        assert config.allowed_methods == ("*",)

    def test_file_from_environment(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"allowed_methods": ["getPublicKey"]}))
        monkeypatch.setenv("WALLETBRIDGE_CONFIG", str(path))

        config = load_runtime_config()
        assert config.allowed_methods == ("getPublicKey",)

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{broken")
        with pytest.raises(ValueError, match="invalid JSON"):
            load_runtime_config(path)

    def test_top_level_must_be_object(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="must be a JSON object"):
            load_runtime_config(path)
