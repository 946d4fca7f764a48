"""End-to-end tests for BridgeRuntime."""

from __future__ import annotations

import asyncio

import pytest

from walletbridge.config.model import RuntimeConfig
from walletbridge.errors import MalformedRequest
from walletbridge.protocol.protocol import UiEvent
from walletbridge.protocol.structures import UiResponse
from walletbridge.services.runtime import BridgeRuntime, DeviceSession

NEM2_PATH = "m/44'/43'/0'/0'/0'"


def _runtime(device, ui, config: RuntimeConfig | None = None) -> BridgeRuntime:
    runtime = BridgeRuntime(config or RuntimeConfig(), DeviceSession(device), ui)
    ui.reply_to = runtime.handle_ui_response
    return runtime


@pytest.mark.asyncio
async def test_confirmed_public_key_request(device, ui):
    runtime = _runtime(device, ui)
    ui.reply = UiResponse(type=UiEvent.RECEIVE_CONFIRMATION, payload=True)

    response = await runtime.call({"method": "getPublicKey", "payload": {"path": "m/44'/43'/0'"}})

    assert response == {
        "success": True,
        "payload": {
            "path": [0x8000002C, 0x8000002B, 0x80000000],
            "serializedPath": "m/44'/43'/0'",
            "publicKey": "PK00",
            "xpub": "xpub00",
        },
    }


@pytest.mark.asyncio
async def test_denied_request_never_touches_device(device, ui):
    runtime = _runtime(device, ui)
    ui.reply = UiResponse(type=UiEvent.POPUP_CLOSED)

    response = await runtime.call({"method": "getPublicKey", "payload": {"path": "m/44'/43'/0'"}})

    assert response == {"success": False, "payload": {"kind": "ActionDenied", "message": "Action cancelled by user"}}
    device.get_public_key.assert_not_awaited()


@pytest.mark.asyncio
async def test_signing_bundle_error_reports_batch(device, ui, nem2_samples):
    runtime = _runtime(device, ui)
    payload = {
        "bundle": [
            {"path": NEM2_PATH, "transaction": nem2_samples["transfer"]},
            {"path": NEM2_PATH, "transaction": {**nem2_samples["transfer"], "type": 0x7777}},
            {"path": NEM2_PATH, "transaction": nem2_samples["hash_lock"]},
        ]
    }

    response = await runtime.call({"method": "nem2SignTransaction", "payload": payload})

    assert response["success"] is False
    assert response["payload"] == {
        "kind": "UnknownTransactionType",
        "message": "Unknown transaction type: 0x7777",
        "batchIndex": 1,
    }
    device.nem2_sign_tx.assert_not_awaited()


@pytest.mark.asyncio
async def test_signing_without_confirmation(device, ui, nem2_samples):
    runtime = _runtime(device, ui)

    response = await runtime.call(
        {"method": "nem2SignTransaction", "payload": {"path": NEM2_PATH, "transaction": nem2_samples["hash_lock"]}}
    )

    assert response["success"] is True
    assert response["payload"]["serializedPath"] == NEM2_PATH
    assert ui.messages == []


@pytest.mark.asyncio
async def test_firmware_window_is_enforced(device, ui):
    config = RuntimeConfig(firmware_model="1", firmware_version="1.9.0")
    runtime = _runtime(device, ui, config)

    response = await runtime.call({"method": "nem2GetPublicKey", "payload": {"path": NEM2_PATH}})

    assert response["payload"]["kind"] == "FirmwareNotSupported"
    assert ui.messages == []


@pytest.mark.asyncio
async def test_firmware_below_minimum(device, ui):
    config = RuntimeConfig(firmware_model="2", firmware_version="2.0.6")
    runtime = _runtime(device, ui, config)

    response = await runtime.call({"method": "nemGetAddress", "payload": {"path": "m/44'/43'/0'"}})
    assert response["payload"]["kind"] == "FirmwareNotSupported"

    config.firmware_version = "2.0.7"
    response = await runtime.call({"method": "nemGetAddress", "payload": {"path": "m/44'/43'/0'"}})
    assert response["success"] is True


@pytest.mark.asyncio
async def test_malformed_and_unknown_requests(device, ui):
    runtime = _runtime(device, ui)

    assert (await runtime.call(b"not json"))["payload"]["kind"] == "MalformedRequest"
    assert (await runtime.call({"method": "nope", "payload": {}}))["payload"]["kind"] == "MethodNotFound"


@pytest.mark.asyncio
async def test_unexpected_failures_are_enveloped(device, ui, monkeypatch):
    runtime = _runtime(device, ui)

    def explode(request):
        raise KeyError("boom")

    monkeypatch.setattr(runtime._registry, "find", explode)
    response = await runtime.call({"method": "getPublicKey", "payload": {}})

    assert response == {"success": False, "payload": {"kind": "UnexpectedError", "message": "'boom'"}}


@pytest.mark.asyncio
async def test_device_runs_are_serialised(device, ui):
    runtime = _runtime(device, ui)
    release = asyncio.Event()
    active = 0
    peak = 0

    async def slow_address(path, network, show):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await release.wait()
        active -= 1
        return {"address": "NA"}

    device.nem_get_address.side_effect = slow_address
    request = {"method": "nemGetAddress", "payload": {"path": "m/44'/43'/0'"}}
    tasks = [asyncio.create_task(runtime.call(request)) for _ in range(2)]
    while active == 0:
        await asyncio.sleep(0)
    release.set()
    responses = await asyncio.gather(*tasks)

    assert [response["success"] for response in responses] == [True, True]
    assert peak == 1


def test_ui_response_mapping_is_validated(device, ui):
    runtime = _runtime(device, ui)

    assert runtime.handle_ui_response({"type": "popup-closed"}) is False
    with pytest.raises(MalformedRequest):
        runtime.handle_ui_response({"payload": True})


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_prompt_at_a_time(device, ui):
    runtime = _runtime(device, ui)

    async def prompts(count: int) -> list[str]:
        while len(ui.of_type(UiEvent.REQUEST_CONFIRMATION)) < count:
            await asyncio.sleep(0)
        return [message.payload["label"] for message in ui.of_type(UiEvent.REQUEST_CONFIRMATION)]

    first = asyncio.create_task(runtime.call({"method": "getPublicKey", "payload": {"path": "m/44'/43'/0'"}}))
    second = asyncio.create_task(runtime.call({"method": "getPublicKey", "payload": {"path": "m/44'/43'/7'"}}))

    labels = await prompts(1)
    for _ in range(10):
        await asyncio.sleep(0)
    assert len(ui.of_type(UiEvent.REQUEST_CONFIRMATION)) == 1
    assert labels[0].endswith("account #1")
    assert runtime.handle_ui_response({"type": "popup-closed"}) is True

    labels = await prompts(2)
    assert labels[1].endswith("account #8")
    assert runtime.handle_ui_response(UiResponse(type=UiEvent.RECEIVE_CONFIRMATION, payload=True)) is True

    denied, granted = await asyncio.gather(first, second)
    assert denied == {"success": False, "payload": {"kind": "ActionDenied", "message": "Action cancelled by user"}}
    assert granted["success"] is True
    assert granted["payload"]["serializedPath"] == "m/44'/43'/7'"
    device.get_public_key.assert_awaited_once()
