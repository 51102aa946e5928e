"""Content fingerprints for the asset store.

fingerprint = BLAKE3(base64(bytes) + extension), truncated to 16 bytes
and hex-encoded. The extension is part of the hashed material because
the store resolves content types from the same key it deduplicates on:
identical bytes under ".css" and ".txt" must land in different slots.
"""

import base64
from pathlib import Path

from blake3 import blake3

FINGERPRINT_BYTES = 16


def fingerprint(content: bytes, extension: str) -> str:
    """Return the 32-char hex fingerprint for *content*.

    *extension* may be given with or without its leading dot.
    """
    material = base64.b64encode(content) + extension.lstrip(".").encode("utf-8")
    return blake3(material).hexdigest(length=FINGERPRINT_BYTES)


def fingerprint_file(path: Path) -> str:
    """Read *path* and fingerprint it. Read errors propagate."""
    path = Path(path)
    return fingerprint(path.read_bytes(), path.suffix)
