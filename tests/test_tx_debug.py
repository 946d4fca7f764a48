"""Tests for the tx_debug utility."""

from __future__ import annotations

import json

import pytest

from walletbridge.tools import tx_debug

from .mocks import GENERATION_HASH, NEM2_SAMPLES, NEM_SAMPLES


def test_build_snapshot_nem2_defaults() -> None:
    snapshot = tx_debug.build_snapshot("nem2", NEM2_SAMPLES["mosaic_supply"])

    assert snapshot.kind == "mosaic_supply"
    assert snapshot.tx_type == 0x424D
    assert snapshot.path == "m/44'/43'/0'/0'/0'"
    assert snapshot.decoded["mosaic_supply"] == {"mosaic_id": "22A26BE7AEB9F3D0", "action": 1, "delta": 1000000}
    assert snapshot.decoded["generation_hash"] == "3B5E1FA6445653C971A50687E75E6D09FB30481055E3990C84B25E9222DC1155"


def test_build_snapshot_explicit_hash_and_path() -> None:
    snapshot = tx_debug.build_snapshot(
        "nem2",
        NEM2_SAMPLES["mosaic_alias"],
        path="m/44'/43'/7'/0'/0'",
        generation_hash=" ".join([GENERATION_HASH[:32], GENERATION_HASH[32:]]),
    )
    assert snapshot.decoded["generation_hash"] == GENERATION_HASH
    assert snapshot.path == "m/44'/43'/7'/0'/0'"


def test_build_snapshot_nem() -> None:
    snapshot = tx_debug.build_snapshot("nem", NEM_SAMPLES["supply_change"])
    assert snapshot.path == "m/44'/43'/0'"
    assert "generation_hash" not in snapshot.decoded


def test_invalid_generation_hash() -> None:
    with pytest.raises(ValueError, match="Invalid generation hash"):
        tx_debug.build_snapshot("nem2", NEM2_SAMPLES["mosaic_alias"], generation_hash="XYZ")


def test_snapshot_render() -> None:
    snapshot = tx_debug.TxDebugSnapshot(
        protocol="nem2",
        tx_type=0x4154,
        kind="transfer",
        path="m/0",
        wire=b"\x01\xab",
        decoded={"transfer": {"mosaics": []}},
    )
    rendered = snapshot.render()

    assert rendered.startswith("[TxDebug] --- Snapshot ---")
    assert "type=0x4154 (transfer)" in rendered
    assert "wire_len=2" in rendered
    assert "wire=01 AB" in rendered
    assert '"mosaics": []' in rendered


def test_main_prints_snapshot(tmp_path, capsys) -> None:
    descriptor = tmp_path / "tx.json"
    descriptor.write_text(json.dumps(NEM2_SAMPLES["hash_lock"]))

    assert tx_debug.main([str(descriptor)]) == 0
    assert "(hash_lock)" in capsys.readouterr().out


def test_main_reports_bridge_errors(tmp_path, capsys) -> None:
    descriptor = tmp_path / "tx.json"
    descriptor.write_text(json.dumps({**NEM_SAMPLES["transfer"], "type": 0x0102}))

    assert tx_debug.main([str(descriptor), "--protocol", "nem"]) == 1
    assert "[TxDebug] UnknownTransactionType: Unknown transaction type: 0x0102" in capsys.readouterr().err


def test_main_rejects_unreadable_descriptor(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        tx_debug.main([str(tmp_path / "missing.json")])
    assert excinfo.value.code == 2


def test_main_rejects_bad_path(tmp_path) -> None:
    descriptor = tmp_path / "tx.json"
    descriptor.write_text(json.dumps(NEM2_SAMPLES["hash_lock"]))

    assert tx_debug.main([str(descriptor), "--path", "not-a-path"]) == 1
