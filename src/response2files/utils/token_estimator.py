"""Token estimation using tiktoken."""

import tiktoken

# cl100k_base, loaded lazily since the first load may download the encoding
_encoder = None


def _get_encoder() -> tiktoken.Encoding:
    """Get or create the tiktoken encoder (lazy loading)."""
    global _encoder
    if _encoder is None:
        _encoder = tiktoken.get_encoding("cl100k_base")
    return _encoder


def estimate_tokens(text: str) -> int:
    """
    Estimate the number of tokens in a text string.

    Args:
        text: Input text to tokenize

    Returns:
        Estimated token count
    """
    if not text:
        return 0
    encoder = _get_encoder()
    return len(encoder.encode(text))


def count_lines(text: str) -> int:
    """Number of lines in a file body (0 for empty)."""
    if not text:
        return 0
    return text.count("\n") + 1
