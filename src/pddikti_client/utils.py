"""
Utility functions for the PDDikti client.

Includes NDJSON/CSV helpers, model coercion and profile-id normalization.
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Type, TypeVar, Union

from loguru import logger
from pydantic import BaseModel, ValidationError

from .models import Institution

M = TypeVar("M", bound=BaseModel)

PROFILE_PREFIX = "/data_pt/"


def strip_profile_prefix(link: str) -> str:
    """Turn a directory ``website-link`` into a profile id."""
    return link.replace(PROFILE_PREFIX, "").strip()


def iter_ndjson(path: Union[str, Path]) -> Iterator[Dict[str, Any]]:
    """
    Yield one decoded JSON object per non-blank line.

    Lines that fail to decode, or decode to something other than an object,
    are logged and skipped.
    """
    with open(path, "r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                doc = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping malformed NDJSON line {lineno} in {path}: {e}")
                continue
            if not isinstance(doc, dict):
                logger.warning(f"Skipping non-object NDJSON line {lineno} in {path}")
                continue
            yield doc


def coerce_model(model: Type[M], doc: Dict[str, Any]) -> M:
    """Validate a raw document into ``model`` (raises pydantic ValidationError)."""
    return model.model_validate(doc)


def iter_models(model: Type[M], path: Union[str, Path]) -> Iterator[M]:
    """NDJSON file -> models, skipping documents that fail validation."""
    for doc in iter_ndjson(path):
        try:
            yield coerce_model(model, doc)
        except ValidationError as e:
            logger.warning(f"Skipping invalid {model.__name__} record: {e.error_count()} error(s)")


def read_institutions_csv(path: Union[str, Path]) -> List[Institution]:
    """Read the institutions CSV (header row with ``nama`` and ``kode``)."""
    with open(path, "r", encoding="utf-8", newline="") as fh:
        reader = csv.DictReader(fh)
        missing = {"nama", "kode"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{path} is missing columns: {sorted(missing)}")
        return [Institution(nama=row["nama"] or "", kode=row["kode"] or "") for row in reader]


def append_ndjson(path: Union[str, Path], doc: Union[BaseModel, Dict[str, Any]]) -> None:
    """Append one JSON document plus newline; creates the file if absent."""
    if isinstance(doc, BaseModel):
        payload = doc.model_dump_json()
    else:
        payload = json.dumps(doc, default=str)
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(payload + "\n")
