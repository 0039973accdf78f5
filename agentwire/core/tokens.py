"""Token estimation without a tokenizer."""


def evaluate_tokens(content: str) -> int:
    """Roughly three UTF-8 bytes per token."""
    return len(content.encode("utf-8")) // 3
