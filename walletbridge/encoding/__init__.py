"""Transaction encoders keyed by protocol."""

from .nem import NEM_ENCODER
from .nem2 import NEM2_ENCODER
from .registry import EncodeContext, TransactionEncoder

ENCODERS = {
    NEM_ENCODER.protocol: NEM_ENCODER,
    NEM2_ENCODER.protocol: NEM2_ENCODER,
}

__all__ = [
    "ENCODERS",
    "EncodeContext",
    "NEM2_ENCODER",
    "NEM_ENCODER",
    "TransactionEncoder",
]
