from .normalizer import normalize, raw_tokens, strip_diacritics, tokenize
from .transfer_detector import TransferDetector, TransferMatch

__all__ = [
    "TransferDetector",
    "TransferMatch",
    "normalize",
    "raw_tokens",
    "strip_diacritics",
    "tokenize",
]
