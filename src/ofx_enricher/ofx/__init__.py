"""OFX rewriting and record counting."""

from .document import decode_export, looks_like_ofx, read_ofx_file
from .reconciliation import ReconciliationCounter
from .transformer import (
    OfxStreamTransformer,
    TransformState,
    amount_digits,
    compose_fitid,
    strip_memo_prefix,
)

__all__ = [
    "decode_export",
    "looks_like_ofx",
    "read_ofx_file",
    "ReconciliationCounter",
    "OfxStreamTransformer",
    "TransformState",
    "amount_digits",
    "compose_fitid",
    "strip_memo_prefix",
]
