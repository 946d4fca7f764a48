"""Transaction encoding inspector for WalletBridge developers.

Reads a transaction descriptor (JSON), encodes it the way a sign request
would and prints the wire bytes plus the decoded protobuf-style mapping.
Nothing is sent to a device.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

import msgspec

from walletbridge.config.model import RuntimeConfig
from walletbridge.encoding import ENCODERS, EncodeContext
from walletbridge.errors import BridgeError
from walletbridge.paths import decode_path, serialize_path

DEFAULT_PATHS = {
    "nem2": "m/44'/43'/0'/0'/0'",
    "nem": "m/44'/43'/0'",
}


@dataclass(slots=True)
class TxDebugSnapshot:
    protocol: str
    tx_type: int
    kind: str
    path: str
    wire: bytes
    decoded: dict[str, object]

    def render(self) -> str:
        return (
            "[TxDebug] --- Snapshot ---\n"
            f"protocol={self.protocol}\n"
            f"type=0x{self.tx_type:04X} ({self.kind})\n"
            f"path={self.path}\n"
            f"wire_len={len(self.wire)}\n"
            f"wire={_hex_with_spacing(self.wire)}\n"
            f"decoded={msgspec.json.format(msgspec.json.encode(self.decoded), indent=2).decode('utf-8')}"
        )


def _hex_with_spacing(data: bytes) -> str:
    return " ".join(f"{byte:02X}" for byte in data)


def _generation_hash(candidate: str | None, descriptor: object) -> bytes | None:
    if candidate:
        compact = "".join(candidate.split())
        try:
            return bytes.fromhex(compact)
        except ValueError as exc:
            raise ValueError(f"Invalid generation hash '{candidate}': {exc}") from exc
    if isinstance(descriptor, dict) and isinstance(descriptor.get("networkType"), int):
        return RuntimeConfig().generation_hash_for(descriptor["networkType"])
    return None


def build_snapshot(
    protocol: str,
    descriptor: object,
    *,
    path: str | None = None,
    generation_hash: str | None = None,
) -> TxDebugSnapshot:
    encoder = ENCODERS[protocol]
    address_n = tuple(decode_path(path or DEFAULT_PATHS[protocol]))
    context = EncodeContext(
        address_n=address_n,
        generation_hash=_generation_hash(generation_hash, descriptor),
    )
    message = encoder.encode(descriptor, context)
    wire = message.encode()
    decoded = encoder.decode(wire)
    return TxDebugSnapshot(
        protocol=protocol,
        tx_type=decoded.type,
        kind=decoded.kind,
        path=serialize_path(address_n),
        wire=wire,
        decoded=decoded.as_dict(),
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Encode a transaction descriptor and show the sign request bytes."
    )
    parser.add_argument("descriptor", type=Path, help="JSON file holding the transaction descriptor.")
    parser.add_argument(
        "--protocol",
        "-P",
        choices=sorted(ENCODERS),
        default="nem2",
        help="Encoder to use (default: nem2).",
    )
    parser.add_argument("--path", help="Derivation path (default depends on protocol).")
    parser.add_argument(
        "--generation-hash",
        help="NEM2 generation hash as hex; defaults to the built-in hash for the networkType.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    try:
        descriptor = msgspec.json.decode(args.descriptor.read_bytes())
    except (OSError, msgspec.DecodeError) as exc:
        parser.error(f"Cannot read descriptor {args.descriptor}: {exc}")
        return 2

    try:
        snapshot = build_snapshot(
            args.protocol,
            descriptor,
            path=args.path,
            generation_hash=args.generation_hash,
        )
    except ValueError as exc:
        parser.error(str(exc))
        return 2
    except BridgeError as exc:
        print(f"[TxDebug] {exc.kind}: {exc.message}", file=sys.stderr)
        return 1

    print(snapshot.render())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
