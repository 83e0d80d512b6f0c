"""
Pydantic data models for the PDDikti directory API.

Field names follow the API's JSON keys so records round-trip through NDJSON
files unchanged.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Institution(BaseModel):
    """One row of the institutions CSV (``nama``, ``kode``)."""

    nama: str
    kode: str

    @field_validator("nama", "kode")
    def _strip(cls, v):
        return v.strip()


class HitEntry(BaseModel):
    """A single directory search match."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = ""
    website_link: str = Field("", alias="website-link")


class DirectoryHit(BaseModel):
    """Response of ``/hit/{code}``: lecturer, study-program and institution matches."""

    model_config = ConfigDict(extra="ignore")

    dosen: List[HitEntry] = Field(default_factory=list)
    prodi: List[HitEntry] = Field(default_factory=list)
    pt: List[HitEntry] = Field(default_factory=list)

    @field_validator("dosen", "prodi", "pt", mode="before")
    def _none_as_empty(cls, v):
        return [] if v is None else v


class Accreditation(BaseModel):
    """Accreditation grant with its validity window."""

    model_config = ConfigDict(extra="ignore")

    akreditasi: Optional[str] = None
    tgl_akreditasi: Optional[datetime] = None
    tgl_berlaku: Optional[datetime] = None

    @field_validator("tgl_akreditasi", "tgl_berlaku", mode="before")
    def _blank_date(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ProfileDetail(BaseModel):
    """Institution profile from ``/v2/detail_pt/{id}``."""

    model_config = ConfigDict(extra="ignore")

    npsn: str = ""
    stat_sp: Optional[str] = None
    nm_lemb: str = ""
    tgl_berdiri: Optional[str] = None
    sk_pendirian_sp: Optional[str] = None
    tgl_sk_pendirian_sp: Optional[str] = None
    jln: Optional[str] = None
    nama_wil: Optional[str] = None
    kode_pos: Optional[str] = None
    no_tel: Optional[str] = None
    no_fax: Optional[str] = None
    email: Optional[str] = None
    website: str = ""
    lintang: Optional[float] = None
    bujur: Optional[float] = None
    id_sp: Optional[str] = None
    luas_tanah: Optional[int] = None
    laboratorium: Optional[int] = None
    ruang_kelas: Optional[int] = None
    perpustakaan: Optional[int] = None
    internet: Optional[bool] = None
    listrik: Optional[bool] = None
    nama_rektor: Optional[str] = None
    akreditasi_list: List[Accreditation] = Field(default_factory=list)

    @field_validator("npsn", "nm_lemb", "website", mode="before")
    def _none_as_blank(cls, v):
        return "" if v is None else v

    @field_validator("akreditasi_list", mode="before")
    def _none_as_empty(cls, v):
        return [] if v is None else v
