"""License corpus matching.

Scores arbitrary text against a corpus of known license texts using the
Sorensen-Dice coefficient over word bigrams. The corpus is loaded once and
then shared read-only by every retriever.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Protocol

from licensebat.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BUNDLED_CORPUS_VERSION = "bundled-1"

# Line prefixes removed before comparison
_COPYRIGHT_LINE = re.compile(
    r"^\s*(?:copyright\b|\(c\)|©|all rights reserved).*$",
    re.IGNORECASE | re.MULTILINE,
)
_LIST_MARKER = re.compile(
    r"^\s*(?:\(?[0-9]{1,2}[.)]|\(?[a-z][.)]|\([ivx]{1,4}\)|[*\-•])\s+",
    re.IGNORECASE | re.MULTILINE,
)
_URL = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
_WORD = re.compile(r"[a-z0-9]+")

# Spelling variants that should not affect the score
_EQUIVALENT_WORDS = {
    "licence": "license",
    "licences": "licenses",
    "licenced": "licensed",
    "sublicence": "sublicense",
    "analogue": "analog",
}

Bigrams = Counter  # Counter[tuple[str, str]]


class LicenseMatch(NamedTuple):
    """Closest known license for a text.

    Attributes:
        name: SPDX identifier of the closest corpus entry.
        score: Similarity in [0, 1].
    """

    name: str
    score: float


class _TextSource(Protocol):
    """Anything directory-like: pathlib.Path or an importlib Traversable."""

    name: str

    def iterdir(self) -> Iterable[Any]: ...

    def read_text(self, encoding: str = ...) -> str: ...


def normalize_license_text(text: str) -> list[str]:
    """Normalize license text into a list of comparable words.

    - Drop copyright lines, list markers and URLs
    - Lowercase and strip punctuation
    - Fold British/American spelling variants

    Args:
        text: Raw license text.

    Returns:
        Normalized words.
    """
    text = _COPYRIGHT_LINE.sub(" ", text)
    text = _LIST_MARKER.sub(" ", text)
    text = _URL.sub(" ", text)
    words = _WORD.findall(text.lower())
    return [_EQUIVALENT_WORDS.get(word, word) for word in words]


def text_bigrams(text: str) -> Bigrams:
    """Multiset of consecutive word pairs of the normalized text."""
    words = normalize_license_text(text)
    return Counter(zip(words, words[1:]))


def dice_coefficient(left: Bigrams, right: Bigrams) -> float:
    """Sorensen-Dice coefficient of two bigram multisets.

    Returns:
        2 * |overlap| / (|left| + |right|), or 0.0 if both are empty.
    """
    total = sum(left.values()) + sum(right.values())
    if total == 0:
        return 0.0
    overlap = sum((left & right).values())
    return 2.0 * overlap / total


class LicenseStore:
    """Precomputed corpus of known license texts.

    Deterministic and free of I/O once built, so a single instance can be
    shared by concurrent retrievals.
    """

    def __init__(self, texts: Mapping[str, str], version: str = "unknown") -> None:
        """Precompute the bigrams of every license text.

        Args:
            texts: License texts keyed by SPDX identifier.
            version: Version label of the corpus snapshot.

        Raises:
            ValueError: If the corpus is empty.
        """
        if not texts:
            raise ValueError("A license corpus needs at least one license text")
        self.version = version
        self._bigrams: dict[str, Bigrams] = {
            name: text_bigrams(texts[name]) for name in sorted(texts)
        }

    def __len__(self) -> int:
        return len(self._bigrams)

    def __contains__(self, name: object) -> bool:
        return name in self._bigrams

    @property
    def names(self) -> list[str]:
        """Sorted SPDX identifiers in the corpus."""
        return list(self._bigrams)

    def analyze(self, text: str) -> LicenseMatch:
        """Find the closest known license for a text.

        Ties are broken by identifier order, so the result is stable.

        Args:
            text: Arbitrary text, usually the content of a LICENSE file.

        Returns:
            LicenseMatch with the closest license and its score.
        """
        candidate = text_bigrams(text)
        best_name = ""
        best_score = 0.0
        for name, bigrams in self._bigrams.items():
            score = dice_coefficient(candidate, bigrams)
            if not best_name or score > best_score:
                best_name = name
                best_score = score
        return LicenseMatch(name=best_name, score=min(best_score, 1.0))

    @classmethod
    def from_text_directory(
        cls, directory: _TextSource, version: str = "unknown"
    ) -> LicenseStore:
        """Build a store from a directory of `<SPDX-ID>.txt` files."""
        texts: dict[str, str] = {}
        for entry in directory.iterdir():
            if entry.name.endswith(".txt"):
                texts[entry.name[: -len(".txt")]] = entry.read_text(encoding="utf-8")
        return cls(texts, version=version)

    @classmethod
    def from_spdx_directory(cls, directory: Path) -> LicenseStore:
        """Build a store from SPDX license-list-data `json/details` files.

        Deprecated license identifiers are skipped.

        Raises:
            ConfigurationError: If a file cannot be read or decoded,
                or the directory holds no license text.
        """
        texts, version = _read_spdx_texts(directory)
        return cls(texts, version=version)

    @classmethod
    def from_snapshot(cls, path: Path) -> LicenseStore:
        """Load a JSON snapshot written by write_corpus_snapshot.

        Raises:
            ConfigurationError: If the snapshot is unreadable or malformed.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read corpus file '{path}': {e}") from e

        licenses = data.get("licenses") if isinstance(data, dict) else None
        if not isinstance(licenses, dict) or not licenses:
            raise ConfigurationError(
                f"Invalid corpus file '{path}': expected a non-empty 'licenses' mapping"
            )
        return cls(licenses, version=str(data.get("version", "unknown")))


def _read_spdx_texts(directory: Path) -> tuple[dict[str, str], str]:
    """Read license texts from SPDX license-list-data `json/details` files.

    Returns:
        Tuple of (texts keyed by SPDX identifier, corpus version label).

    Raises:
        ConfigurationError: If a file cannot be decoded or nothing is found.
    """
    texts: dict[str, str] = {}
    version = "unknown"
    for path in sorted(directory.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Cannot read SPDX license file '{path}': {e}"
            ) from e
        if not isinstance(data, dict) or data.get("isDeprecatedLicenseId"):
            continue
        license_id = data.get("licenseId")
        license_text = data.get("licenseText")
        if license_id and license_text:
            texts[license_id] = license_text
            version = data.get("licenseListVersion", version)

    if not texts:
        raise ConfigurationError(f"No SPDX license texts found in '{directory}'")
    return texts, f"spdx-{version}"


def write_corpus_snapshot(spdx_directory: Path, output: Path) -> int:
    """Write a JSON corpus snapshot from SPDX license-list-data.

    Args:
        spdx_directory: The SPDX `json/details` directory.
        output: Destination JSON file.

    Returns:
        Number of licenses written.

    Raises:
        ConfigurationError: If reading or writing fails.
    """
    texts, version = _read_spdx_texts(spdx_directory)
    snapshot = {"version": version, "licenses": texts}
    try:
        output.write_text(
            json.dumps(snapshot, indent=1, sort_keys=True), encoding="utf-8"
        )
    except OSError as e:
        raise ConfigurationError(f"Cannot write corpus file '{output}': {e}") from e

    logger.info("Wrote %d licenses to %s", len(texts), output)
    return len(texts)


def load_default_store() -> Optional[LicenseStore]:
    """Load the corpus bundled with licensebat.

    Returns:
        The bundled LicenseStore, or None when the corpus is missing.
        Callers treat None as "no corpus", not as an error.
    """
    try:
        corpus_dir = resources.files("licensebat") / "data" / "corpus"
        return LicenseStore.from_text_directory(
            corpus_dir, version=BUNDLED_CORPUS_VERSION
        )
    except (OSError, ValueError) as e:
        logger.warning("License corpus unavailable, text analysis disabled: %s", e)
        return None


def load_store(corpus_path: Optional[str] = None) -> Optional[LicenseStore]:
    """Load a corpus from a path, or the bundled one.

    Args:
        corpus_path: A JSON snapshot file, an SPDX `json/details`
            directory, or a directory of `<SPDX-ID>.txt` files.

    Returns:
        The loaded LicenseStore, or None if the bundled corpus is missing.

    Raises:
        ConfigurationError: If an explicit corpus path cannot be loaded.
    """
    if corpus_path is None:
        return load_default_store()

    path = Path(corpus_path)
    if path.is_file():
        return LicenseStore.from_snapshot(path)
    if path.is_dir():
        if any(path.glob("*.json")):
            return LicenseStore.from_spdx_directory(path)
        try:
            return LicenseStore.from_text_directory(path, version=path.name)
        except ValueError as e:
            raise ConfigurationError(f"No license texts found in '{path}'") from e
    raise ConfigurationError(f"Corpus path '{path}' does not exist")
