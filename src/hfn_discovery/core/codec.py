"""YAML encoding of persisted collections."""

from typing import Any, Optional

import yaml

from hfn_discovery.core.exceptions import CorruptStoreError

FORMAT_VERSION = 1


def encode_document(payload: dict[str, Any]) -> bytes:
    """Serialize a collection document as UTF-8 YAML."""
    document = {"format_version": FORMAT_VERSION, **payload}
    text = yaml.safe_dump(document, allow_unicode=True, default_flow_style=False, sort_keys=False)
    return text.encode("utf-8")


def decode_document(data: Optional[bytes]) -> Optional[dict[str, Any]]:
    """Parse a collection document.

    Returns None when nothing was stored. Raises ``CorruptStoreError`` when the
    payload is not a YAML mapping of a supported version.
    """
    if data is None or not data.strip():
        return None

    try:
        document = yaml.safe_load(data.decode("utf-8"))
    except (UnicodeDecodeError, yaml.YAMLError) as e:
        raise CorruptStoreError(f"Cannot parse stored document: {e}") from e

    if not isinstance(document, dict):
        raise CorruptStoreError("Stored document is not a mapping")

    version = document.get("format_version")
    if version != FORMAT_VERSION:
        raise CorruptStoreError(f"Unsupported format version: {version!r}")

    return document
