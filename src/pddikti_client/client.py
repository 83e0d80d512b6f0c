from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from .errors import (
    DirectoryDecodeError,
    InstitutionNotFound,
    PDDiktiError,
    map_http_error,
)
from .models import DirectoryHit, Institution, ProfileDetail
from .utils import strip_profile_prefix

DEFAULT_BASE_URL = "https://api-frontend.kemdikbud.go.id"


@dataclass
class _Cfg:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    user_agent: Optional[str] = "univ-icon-crawler/1.0"
    follow_redirects: bool = True


# Public alias
PDDiktiConfig = _Cfg


class PDDikti:
    """
    Synchronous client for the PDDikti directory API.

    Usage:

        with PDDikti({"base_url": "https://api-frontend.kemdikbud.go.id"}) as api:
            detail = api.resolve(Institution(nama="...", kode="001002"))
    """

    def __init__(self, config: Optional[dict] = None, *, transport: Optional[httpx.BaseTransport] = None):
        c = _Cfg(**(config or {}))
        self._cfg = c
        headers = {"User-Agent": c.user_agent} if c.user_agent else {}
        self._client = httpx.Client(
            base_url=c.base_url,
            timeout=httpx.Timeout(c.timeout),
            follow_redirects=c.follow_redirects,
            headers=headers,
            transport=transport,
        )

    def __enter__(self) -> "PDDikti":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ---------- internal helpers ----------

    def _get_json(self, path: str) -> Any:
        try:
            resp = self._client.get(path)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise map_http_error(e) from e
        try:
            return resp.json()
        except ValueError as e:
            raise DirectoryDecodeError(f"{path}: invalid JSON body: {e}") from e

    # ---------- lookups ----------

    def get_profile_id(self, code: str, name: str = "") -> str:
        """Search the directory by institution code; return the first match's profile id."""
        doc = self._get_json(f"/hit/{code}")
        try:
            hits = DirectoryHit.model_validate(doc)
        except ValidationError as e:
            raise DirectoryDecodeError(f"/hit/{code}: unexpected shape: {e}") from e

        if not hits.pt:
            raise InstitutionNotFound(f"{name or code} not found!")

        profile_id = strip_profile_prefix(hits.pt[0].website_link)
        if not profile_id:
            raise InstitutionNotFound(f"{name or code} has an empty profile link")
        return profile_id

    def get_profile(self, profile_id: str) -> ProfileDetail:
        doc = self._get_json(f"/v2/detail_pt/{profile_id}")
        if not isinstance(doc, dict):
            raise DirectoryDecodeError(f"detail_pt/{profile_id}: expected a JSON object")
        try:
            return ProfileDetail.model_validate(doc)
        except ValidationError as e:
            raise DirectoryDecodeError(f"detail_pt/{profile_id}: unexpected shape: {e}") from e

    def resolve(self, institution: Institution) -> ProfileDetail:
        """Code -> profile id -> profile detail."""
        profile_id = self.get_profile_id(institution.kode, institution.nama)
        logger.info(
            f"Visiting {institution.nama} (univ_code={institution.kode} dikti_code={profile_id})"
        )
        detail = self.get_profile(profile_id)
        logger.info(f"{institution.nama} Website: {detail.website}")
        return detail


__all__ = ["PDDikti", "PDDiktiConfig", "PDDiktiError", "DEFAULT_BASE_URL"]
