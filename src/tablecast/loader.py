"""Resolve a descriptor source (mapping, JSON text, path or URL) to a dict."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Mapping

import requests
from loguru import logger

from .errors import SchemaLoadError

DEFAULT_TIMEOUT = 10.0


def _is_json_text(source: str) -> bool:
    return source.lstrip().startswith(("{", "["))


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _parse(text: str, source: Any) -> dict[str, Any]:
    try:
        descriptor = json.loads(text)
    except ValueError as e:
        raise SchemaLoadError(f"descriptor is not valid JSON: {e}", source) from e
    if not isinstance(descriptor, dict):
        raise SchemaLoadError("descriptor must be an object", source)
    return descriptor


def _load_url(url: str, timeout: float) -> dict[str, Any]:
    logger.debug(f"Fetching descriptor from {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise SchemaLoadError(f"failed to fetch descriptor from {url}: {e}", url) from e
    return _parse(response.text, url)


def _load_path(path: Path) -> dict[str, Any]:
    logger.debug(f"Reading descriptor from {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaLoadError(f"failed to read descriptor from {path}: {e}", path) from e
    return _parse(text, path)


def load_descriptor(source: Any, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """
    Load a schema descriptor.

    Parameters
    ----------
    source : Mapping | str | os.PathLike
        An already-parsed mapping (deep-copied), inline JSON text, an
        ``http(s)://`` URL, or a path to a JSON file.
    timeout : float, default 10.0
        Seconds to wait when fetching a URL.

    Returns
    -------
    dict
        The parsed descriptor. Its structure is not validated here.

    Raises
    ------
    SchemaLoadError
        If the source cannot be read or parsed, or is not a JSON object.
    """
    if isinstance(source, Mapping):
        return copy.deepcopy(dict(source))
    if isinstance(source, os.PathLike):
        return _load_path(Path(source))
    if isinstance(source, str):
        if _is_json_text(source):
            return _parse(source, None)
        if _is_url(source):
            return _load_url(source, timeout)
        return _load_path(Path(source))
    raise SchemaLoadError(
        f"descriptor must be an object, got {type(source).__name__}", source
    )
