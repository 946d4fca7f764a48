"""Command construction tests: payload normalisation and batch atomicity."""

from __future__ import annotations

import pytest

from walletbridge.config.model import RuntimeConfig
from walletbridge.errors import InvalidParameter, UnknownTransactionType, ValidationError
from walletbridge.paths import HD_HARDENED, decode_path
from walletbridge.protocol import nem2
from walletbridge.protocol.protocol import PERMISSION_READ, PERMISSION_WRITE
from walletbridge.services.command import Command, ConfirmationState
from walletbridge.services.methods import METHODS

from .mocks import GENERATION_HASH

NEM2_PATH = "m/44'/43'/0'/0'/0'"


def _sign_batch(transaction, **extra):
    return {"path": NEM2_PATH, "transaction": transaction, **extra}


class TestPayloadNormalisation:
    def test_plain_payload_is_one_implicit_batch(self):
        command = Command(METHODS["getPublicKey"], {"path": "m/44'/43'/0'"})

        assert command.is_bundle is False
        assert command.batches[0].path == (HD_HARDENED | 44, HD_HARDENED | 43, HD_HARDENED)
        assert command.batches[0].show_on_device is False
        assert command.confirmed is ConfirmationState.UNKNOWN

    def test_bundle_payload_keeps_order(self):
        command = Command(
            METHODS["getPublicKey"],
            {"bundle": [{"path": "m/44'/43'/0'"}, {"path": "m/44'/43'/1'", "showOnTrezor": True}]},
        )

        assert command.is_bundle is True
        assert [batch.path[2] for batch in command.batches] == [HD_HARDENED, HD_HARDENED | 1]
        assert [batch.show_on_device for batch in command.batches] == [False, True]

    def test_bundle_must_be_an_array(self):
        with pytest.raises(ValidationError, match='"bundle" has invalid type. "array" expected'):
            Command(METHODS["getPublicKey"], {"bundle": {"path": "m/1"}})

    def test_empty_bundle_is_rejected(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            Command(METHODS["getPublicKey"], {"bundle": []})

    def test_payload_must_be_an_object(self):
        with pytest.raises(ValidationError, match="must be an object"):
            Command(METHODS["getPublicKey"], "m/44'")

    def test_implicit_batch_errors_report_index_zero(self):
        with pytest.raises(ValidationError) as excinfo:
            Command(METHODS["getPublicKey"], {})
        assert excinfo.value.to_response() == {
            "kind": "ValidationError",
            "message": 'Parameter "path" is missing.',
            "batchIndex": 0,
        }

    def test_show_flag_must_be_boolean(self):
        with pytest.raises(ValidationError, match='"showOnTrezor" has invalid type'):
            Command(METHODS["getPublicKey"], {"path": "m/1", "showOnTrezor": "yes"})


class TestDescriptorPassthrough:
    def test_read_method(self):
        command = Command(METHODS["nemGetAddress"], {"path": "m/44'/43'/0'"})
        assert command.name == "nemGetAddress"
        assert command.info == "Export NEM address"
        assert command.required_permissions == (PERMISSION_READ,)
        assert set(command.firmware_range) == {"1", "2"}
        assert command.requires_confirmation is False
        assert command.label is None

    def test_signing_method_needs_write(self):
        command = Command(METHODS["nem2SignTransaction"], _sign_batch(dict(_mosaic_alias())))
        assert command.required_permissions == (PERMISSION_READ, PERMISSION_WRITE)

    def test_single_and_plural_labels(self):
        single = Command(METHODS["getPublicKey"], {"path": "m/44'/43'/4'"})
        bundle = Command(METHODS["getPublicKey"], {"bundle": [{"path": "m/1"}, {"path": "m/2"}]})
        short = Command(METHODS["getPublicKey"], {"path": "m/1"})

        assert single.label == "Export public key for account #5"
        assert bundle.label == "Export multiple public keys"
        assert short.label == "Export public key"


def _mosaic_alias():
    return {
        "type": nem2.TX_MOSAIC_ALIAS,
        "networkType": nem2.NETWORK_TESTNET,
        "version": 1,
        "maxFee": "0",
        "deadline": "1",
        "namespaceId": "82A9D1AC587EC054",
        "mosaicId": "22A26BE7AEB9F3D0",
        "aliasAction": 1,
    }


class TestNem2Signing:
    def test_message_is_encoded_at_construction(self, nem2_samples):
        command = Command(METHODS["nem2SignTransaction"], _sign_batch(nem2_samples["transfer"]))

        message = command.batches[0].message
        assert message is not None
        assert message.kind == "transfer"
        assert message.address_n == tuple(decode_path(NEM2_PATH))

    def test_generation_hash_defaults_from_network(self):
        command = Command(METHODS["nem2SignTransaction"], _sign_batch(_mosaic_alias()))
        assert command.batches[0].message.generation_hash == RuntimeConfig().generation_hash_for(
            nem2.NETWORK_TESTNET
        )

    def test_explicit_generation_hash_wins(self):
        explicit = "AB" * 32
        command = Command(
            METHODS["nem2SignTransaction"], _sign_batch(_mosaic_alias(), generationHash=explicit)
        )
        assert command.batches[0].message.generation_hash == bytes.fromhex(explicit)

    def test_network_without_configured_hash(self):
        transaction = {**_mosaic_alias(), "networkType": nem2.NETWORK_MIJIN}
        with pytest.raises(InvalidParameter, match="Generation hash is required"):
            Command(METHODS["nem2SignTransaction"], _sign_batch(transaction))

    def test_configured_hash_is_used(self):
        config = RuntimeConfig(nem2_generation_hashes={"mijin": GENERATION_HASH})
        transaction = {**_mosaic_alias(), "networkType": nem2.NETWORK_MIJIN}
        command = Command(METHODS["nem2SignTransaction"], _sign_batch(transaction), config=config)
        assert command.batches[0].message.generation_hash == bytes.fromhex(GENERATION_HASH)

    def test_transaction_is_required(self):
        with pytest.raises(ValidationError, match='"transaction" is missing'):
            Command(METHODS["nem2SignTransaction"], {"path": NEM2_PATH})

    def test_path_must_have_five_components(self):
        with pytest.raises(InvalidParameter, match="expected 5 components"):
            Command(METHODS["nem2SignTransaction"], {"path": "m/44'/43'/0'", "transaction": _mosaic_alias()})

    def test_bad_second_batch_fails_whole_bundle(self, nem2_samples, device):
        payload = {
            "bundle": [
                _sign_batch(nem2_samples["transfer"]),
                _sign_batch({**nem2_samples["transfer"], "type": 0x1234}),
                _sign_batch(nem2_samples["hash_lock"]),
            ]
        }

        with pytest.raises(UnknownTransactionType) as excinfo:
            Command(METHODS["nem2SignTransaction"], payload)

        assert excinfo.value.batch_index == 1
        assert excinfo.value.to_response()["batchIndex"] == 1
        device.nem2_sign_tx.assert_not_awaited()

    def test_namespace_registration_rules_surface_with_index(self, nem2_samples):
        root_without_duration = dict(nem2_samples["namespace_registration"])
        del root_without_duration["duration"]
        child_without_parent = {**nem2_samples["namespace_registration"], "registrationType": 1}

        for index, transaction in enumerate((root_without_duration, child_without_parent)):
            payload = {"bundle": [_sign_batch(nem2_samples["hash_lock"])] * index + [_sign_batch(transaction)]}
            with pytest.raises(InvalidParameter) as excinfo:
                Command(METHODS["nem2SignTransaction"], payload)
            assert excinfo.value.batch_index == index


class TestNemMethods:
    def test_address_network_defaults_from_config(self):
        command = Command(METHODS["nemGetAddress"], {"path": "m/44'/43'/0'"})
        assert command.batches[0].network == 0x68

        config = RuntimeConfig(nem_default_network=0x98)
        command = Command(METHODS["nemGetAddress"], {"path": "m/44'/43'/0'"}, config=config)
        assert command.batches[0].network == 0x98

    def test_address_network_must_be_known(self):
        with pytest.raises(InvalidParameter, match="Invalid NEM network"):
            Command(METHODS["nemGetAddress"], {"path": "m/44'/43'/0'", "network": 0x11})

    def test_nem_signing_has_no_generation_hash(self, nem_samples):
        command = Command(
            METHODS["nemSignTransaction"], {"path": "m/44'/43'/0'", "transaction": nem_samples["transfer"]}
        )
        assert command.batches[0].message.generation_hash is None
        assert command.batches[0].message.kind == "transfer"
