"""Read import batches and the shared scoring block from files or URLs."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from registry_loader.errors import InputReadError
from registry_loader.models.raw import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "registry-loader/0.1",
    "Accept": "application/json, text/plain, */*",
}


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_text(url: str, client: Optional[httpx.Client] = None) -> str:
    """Fetch a document over HTTP."""
    own_client = client is None
    client = client or httpx.Client(timeout=60.0, follow_redirects=True, headers=DEFAULT_HEADERS)
    try:
        response = client.get(url)
        response.raise_for_status()
        return response.text
    except httpx.HTTPStatusError as e:
        raise InputReadError(f"Cannot fetch {url}: HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise InputReadError(f"Cannot fetch {url}: {e}") from e
    finally:
        if own_client:
            client.close()


def load_json(source: str | Path, client: Optional[httpx.Client] = None) -> Any:
    """Load a JSON document from a local path or an http(s) URL."""
    source_str = str(source)
    if _is_url(source_str):
        text = _fetch_text(source_str, client)
    else:
        path = Path(source_str).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise InputReadError(f"Cannot read {path}: {e}") from e
    try:
        return json.loads(text)
    except ValueError as e:
        raise InputReadError(f"{source_str} is not valid JSON: {e}") from e


def read_records(
    source: str | Path,
    *,
    client: Optional[httpx.Client] = None,
    limit: Optional[int] = None,
) -> list[RawRecord]:
    """
    Load raw records from a JSON array (a single object is one record).
    Entries that are not objects become empty records, so they are counted
    as failures downstream instead of disappearing.
    """
    data = load_json(source, client)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise InputReadError(f"{source} must hold a JSON array of records, got {type(data).__name__}")
    if limit is not None:
        data = data[:limit]

    records: list[RawRecord] = []
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("Record %d is a %s, not an object", position + 1, type(item).__name__)
            item = {}
        records.append(RawRecord(data=item, position=position))
    logger.info("Loaded %d records from %s", len(records), source)
    return records


def read_scoring(source: str | Path, *, client: Optional[httpx.Client] = None) -> Any:
    """
    Load the shared scoring block: the "scoring" key of a JSON object, or a
    bare JSON array. Returns None when the document carries no scoring.
    """
    data = load_json(source, client)
    if isinstance(data, dict):
        scoring = data.get("scoring")
        if scoring is None:
            logger.warning("No scoring block found in %s", source)
        return scoring
    if isinstance(data, list):
        return data
    logger.warning("Ignoring scoring document %s of type %s", source, type(data).__name__)
    return None
