"""
PDDikti Directory Client Library

Resolves Indonesian higher-education institutions to their canonical
PDDikti profile (address, accreditation history, website, ...).

Usage:
    from pddikti_client import PDDikti, Institution

    with PDDikti() as api:
        detail = api.resolve(Institution(nama="Universitas Indonesia", kode="001002"))
"""

from .client import PDDikti, PDDiktiConfig, DEFAULT_BASE_URL
from .errors import (
    PDDiktiError,
    RetryableError,
    TimeoutExceeded,
    InstitutionNotFound,
    DirectoryDecodeError,
)
from .models import Institution, DirectoryHit, HitEntry, ProfileDetail, Accreditation
from .resolver import resolve_all, ResolveStats

__version__ = "1.0.0"
__all__ = [
    "PDDikti",
    "PDDiktiConfig",
    "DEFAULT_BASE_URL",
    "PDDiktiError",
    "RetryableError",
    "TimeoutExceeded",
    "InstitutionNotFound",
    "DirectoryDecodeError",
    "Institution",
    "DirectoryHit",
    "HitEntry",
    "ProfileDetail",
    "Accreditation",
    "resolve_all",
    "ResolveStats",
]
