"""
YAML encoding and decoding of the index document.
"""
from __future__ import annotations

from typing import Any, Union

import yaml
from pydantic import ValidationError

from chartindex.domain.errors import ParseError
from chartindex.domain.models import IndexFile


def encode_index(index: IndexFile) -> bytes:
    """
    Serialize an index to YAML bytes.

    Keys are written in sorted order so the same index always produces the
    same document. Fields that are unset (None) are omitted.
    """
    data = index.model_dump(mode="json", by_alias=True, exclude_none=True)
    text = yaml.safe_dump(
        data,
        sort_keys=True,
        default_flow_style=False,
        allow_unicode=True,
    )
    return text.encode("utf-8")


def decode_index(data: Union[bytes, str]) -> IndexFile:
    """
    Parse YAML into an IndexFile.

    An empty document is an empty index. Raises ParseError if the data is not
    YAML or does not have the shape of an index.
    """
    try:
        raw: Any = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ParseError(f"index is not valid YAML: {e}") from e

    if raw is None:
        return IndexFile()
    if not isinstance(raw, dict):
        raise ParseError(
            f"index must be a mapping at the top level, got {type(raw).__name__}"
        )

    try:
        return IndexFile.model_validate(raw)
    except ValidationError as e:
        raise ParseError(f"index does not match the expected shape: {e}") from e
