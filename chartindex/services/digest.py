"""
Content digests of chart archives.
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union


def digest_file(path: Union[str, Path]) -> str:
    """
    SHA256 of a file as a hex string.

    The index stores this verbatim; it never interprets the value.
    """
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()
