"""License retrievers, one per package registry."""

from licensebat.retrievers.base import (
    BaseRetriever,
    LicenseClassification,
    classify_license_text,
)
from licensebat.retrievers.crates_io import CratesIoRetriever
from licensebat.retrievers.docs_rs import DocsRsRetriever
from licensebat.retrievers.npm import NpmRetriever
from licensebat.retrievers.pub_dev import PubDevRetriever

__all__ = [
    "BaseRetriever",
    "CratesIoRetriever",
    "DocsRsRetriever",
    "LicenseClassification",
    "NpmRetriever",
    "PubDevRetriever",
    "classify_license_text",
]
