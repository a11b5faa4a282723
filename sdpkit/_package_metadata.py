"""Package metadata, from the installed distribution or from the source tree."""

from __future__ import annotations

import importlib.metadata as importlib_metadata
import warnings
from email.message import Message
from pathlib import Path
from typing import Any, Mapping, Sequence

import toml


_PYPROJECT_PATH: Path = Path(__file__).resolve().parent.parent / "pyproject.toml"


def _load_metadata() -> Message | Mapping[str, Any] | None:
    try:
        return importlib_metadata.metadata(__package__ or __name__)
    except importlib_metadata.PackageNotFoundError:
        pass
    if _PYPROJECT_PATH.exists():
        return toml.load(_PYPROJECT_PATH)
    warnings.warn("No installed sdpkit distribution nor pyproject.toml found", stacklevel=2)
    return None


_metadata: Message | Mapping[str, Any] | None = _load_metadata()


def get_metadata(distinfo_key: str, pyproject_path: Sequence[str | int]) -> Any:
    """
    Look up a package metadata value.

    :param distinfo_key: the dist-info key, used when sdpkit is installed.
    :param pyproject_path: the keys leading to the value in ``pyproject.toml``,
        used when running from a source checkout.
    :return: the metadata value, or None if not available.
    """
    if _metadata is None:
        return None
    if isinstance(_metadata, Message):
        return _metadata.get(distinfo_key)
    value: Any = _metadata
    for key in pyproject_path:
        try:
            value = value[key]
        except (KeyError, IndexError, TypeError):
            return None
    return value
