"""License analysis for licensebat."""

from licensebat.analysis.corpus import (
    LicenseMatch,
    LicenseStore,
    load_default_store,
    load_store,
    write_corpus_snapshot,
)
from licensebat.analysis.filtering import FilterResult, filter_dependencies
from licensebat.analysis.licenses import (
    is_exact_sentinel,
    normalize_license_id,
    same_license,
)
from licensebat.analysis.policy import (
    get_ignore_reason,
    is_license_compliant,
    validate_dependency,
)

__all__ = [
    "FilterResult",
    "LicenseMatch",
    "LicenseStore",
    "filter_dependencies",
    "get_ignore_reason",
    "is_exact_sentinel",
    "is_license_compliant",
    "load_default_store",
    "load_store",
    "normalize_license_id",
    "same_license",
    "validate_dependency",
    "write_corpus_snapshot",
]
