"""
Settings for the chart index, read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

DATA_ROOT_ENV_VAR = "CHARTINDEX_DATA_DIR"
INDEX_FILENAME_ENV_VAR = "CHARTINDEX_INDEX_FILENAME"
PRIMARY_BASE_URL_ENV_VAR = "CHARTINDEX_PRIMARY_BASE_URL"
MIRROR_BASE_URL_ENV_VAR = "CHARTINDEX_MIRROR_BASE_URL"

# Resolve repository root (project root, not the Python package root)
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"


class IndexSettings(BaseModel):
    """
    Where the index lives and which base locations its URLs are built from.
    """

    data_dir: Path = Field(
        default=_DEFAULT_DATA_DIR,
        description="Directory holding the index file.",
    )
    index_filename: str = Field(
        default="index.yaml",
        min_length=1,
        description="File name of the index inside data_dir.",
    )
    primary_base_url: str = Field(
        default="",
        description="Base location of the chart storage (empty = not configured).",
    )
    mirror_base_url: str = Field(
        default="",
        description="Public base location; defaults to primary_base_url when empty.",
    )

    @property
    def index_path(self) -> Path:
        return self.data_dir / self.index_filename


def load_settings(environ: Optional[Mapping[str, str]] = None) -> IndexSettings:
    """
    Build settings from the environment.

    Priority for the data directory:
    1. Environment variable CHARTINDEX_DATA_DIR
    2. '<project root>/data'
    The directory is created if it does not exist.
    """
    env = os.environ if environ is None else environ

    values = {}
    data_dir = env.get(DATA_ROOT_ENV_VAR)
    if data_dir:
        values["data_dir"] = Path(data_dir).expanduser()
    index_filename = env.get(INDEX_FILENAME_ENV_VAR)
    if index_filename:
        values["index_filename"] = index_filename
    values["primary_base_url"] = env.get(PRIMARY_BASE_URL_ENV_VAR, "")
    values["mirror_base_url"] = env.get(MIRROR_BASE_URL_ENV_VAR, "")

    settings = IndexSettings(**values)
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
