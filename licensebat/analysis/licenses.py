"""License identifier helpers.

Uses the license-expression library to normalize declared license names
before they are compared with corpus matches.
"""

from typing import Optional

from license_expression import (
    ExpressionError,
    get_spdx_licensing,
)

# Initialize SPDX licensing for parsing
_licensing = get_spdx_licensing()

# Declared identifiers trusted without looking at the license text
EXACT_SENTINELS: frozenset[str] = frozenset({"MIT"})


def normalize_license_id(license_id: Optional[str]) -> Optional[str]:
    """Normalize a license identifier using SPDX licensing.

    Known identifiers are resolved case-insensitively and through SPDX
    aliases (e.g. "mit" -> "MIT"). Compound expressions are rendered
    back in canonical form.

    Args:
        license_id: License identifier, expression or None.

    Returns:
        Normalized identifier, the stripped input if it cannot be parsed,
        or None for empty input.
    """
    if license_id is None:
        return None

    license_id = license_id.strip()
    if not license_id:
        return None

    try:
        parsed = _licensing.parse(license_id)
    except ExpressionError:
        return license_id
    if parsed is None:
        return None
    if hasattr(parsed, "key"):
        return str(parsed.key)
    return parsed.render()


def _comparable(license_id: str) -> str:
    normalized = normalize_license_id(license_id) or ""
    return normalized.lower().replace("-", " ").strip()


def same_license(declared: Optional[str], matched: Optional[str]) -> bool:
    """Check if a declared license name designates a matched license.

    The comparison ignores case, SPDX aliases and dashes vs. spaces, so
    "BSD 3 Clause" and "BSD-3-Clause" are the same license.
    """
    if not declared or not matched:
        return False
    return _comparable(declared) == _comparable(matched)


def is_exact_sentinel(license_id: Optional[str]) -> bool:
    """Check if a declared license is accepted without text analysis."""
    if license_id is None:
        return False
    return license_id.strip() in EXACT_SENTINELS
