import re
from typing import Any, Iterable, Mapping, Optional

_REDACTED = "****"


def truncate_for_log(text: str, limit: int) -> str:
    """
    Shorten text for a log line.

    Args:
        text (str): The text to shorten, usually a prompt.
        limit (int): Maximum number of characters to keep.

    Returns:
        str: ``text`` unchanged if it fits, otherwise its first ``limit``
        characters followed by ``...``.
    """
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def redact(text: str, secret: Optional[str]) -> str:
    """
    Mask every occurrence of ``secret`` in ``text``.

    The last four characters are kept so operators can still tell keys apart.
    """
    if not text or not secret:
        return text or ""
    tail = secret[-4:] if len(secret) > 8 else ""
    return re.sub(re.escape(secret), f"{_REDACTED}{tail}", text)


def data_uri(payload: str, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{payload}"


def first_item(value: Any) -> Optional[Any]:
    """Return the first element of a non-empty list, otherwise ``None``."""
    if isinstance(value, list) and value:
        return value[0]
    return None


def first_present(source: Any, keys: Iterable[str]) -> Optional[str]:
    """Return the first non-empty string stored under one of ``keys``.

    Values of any other type are skipped, so a nested object under an early
    key does not hide a usable string under a later one.
    """
    if not isinstance(source, Mapping):
        return None
    for key in keys:
        value = source.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def describe_keys(source: Any) -> str:
    if isinstance(source, Mapping) and source:
        return ", ".join(str(key) for key in source.keys())
    return "none"
