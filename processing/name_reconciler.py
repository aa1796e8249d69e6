"""
Name reconciler — resolves free-text names across the three vocabularies.

FAOSTAT, Resource Trade Earth and BIOVALENT each name items and locations
their own way.  Manual matching tables translate one vocabulary into another.
Each table is loaded into a multi-valued lookup (source name → list of target
names) and joined explicitly: a row fans out once per target, and a row with
no entry is kept once with the target set to None.

Every key is cleaned with clean_text() on both sides of the join, otherwise
names that differ only by a non-breaking space silently fail to match.

Public API:
    clean_text(value) → str | None
    clean_column(series) → pd.Series
    NameReconciler(mapping_table, source_column, target_column, label)
    NameMatch, MatchStatus
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

from processing.validation import validate_columns

logger = logging.getLogger(__name__)

_NON_BREAKING_SPACE = "\u00a0"
_WHITESPACE_RUN = re.compile(r"\s+")


# ═══════════════════════════════════════════════════════════════════════════
# Text cleaning
# ═══════════════════════════════════════════════════════════════════════════

def clean_text(value: object) -> str | None:
    """
    Normalize a join key.

    Replaces non-breaking spaces with ordinary spaces, collapses runs of
    whitespace to a single space and trims both ends.  Missing values
    (None / NaN) stay missing.

    Args:
        value: Raw cell value.

    Returns:
        Cleaned string, or None for a missing value.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    text = str(value).replace(_NON_BREAKING_SPACE, " ")
    return _WHITESPACE_RUN.sub(" ", text).strip()


def clean_column(series: pd.Series) -> pd.Series:
    """Apply clean_text() to every value of a column; missing values stay None."""
    return pd.Series([clean_text(v) for v in series], index=series.index, dtype=object)


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

class MatchStatus(Enum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class NameMatch:
    """Outcome of looking up one source name."""

    source: str | None
    targets: tuple[str, ...] = field(default_factory=tuple)

    @property
    def status(self) -> MatchStatus:
        if not self.targets:
            return MatchStatus.UNMATCHED
        if len(self.targets) > 1:
            return MatchStatus.AMBIGUOUS
        return MatchStatus.MATCHED


# ═══════════════════════════════════════════════════════════════════════════
# Reconciler
# ═══════════════════════════════════════════════════════════════════════════

class NameReconciler:
    """
    Multi-valued lookup built from one manual matching table.

    Duplicate (source, target) rows are preserved, so they fan out downstream
    exactly as often as they appear in the matching table.
    """

    def __init__(
        self,
        mapping_table: pd.DataFrame,
        source_column: str,
        target_column: str,
        label: str = "",
    ):
        validate_columns(mapping_table, [source_column, target_column], label or "matching table")

        self.source_column = source_column
        self.target_column = target_column
        self.label = label or f"{source_column} → {target_column}"
        self._lookup: dict[str, list[str]] = {}

        skipped = 0
        for source, target in zip(mapping_table[source_column], mapping_table[target_column]):
            source_clean = clean_text(source)
            target_clean = clean_text(target)
            if not source_clean or not target_clean:
                skipped += 1
                continue
            self._lookup.setdefault(source_clean, []).append(target_clean)

        if skipped:
            logger.debug(f"[{self.label}] skipped {skipped} incomplete mapping rows")

        logger.info(
            f"[{self.label}] loaded {len(self._lookup)} source names, "
            f"{sum(len(v) for v in self._lookup.values())} mappings"
        )

    def __len__(self) -> int:
        return len(self._lookup)

    @property
    def vocabulary(self) -> list[str]:
        """Sorted distinct target names."""
        return sorted({t for targets in self._lookup.values() for t in targets})

    @property
    def source_names(self) -> list[str]:
        return sorted(self._lookup)

    def match(self, name: object) -> NameMatch:
        """Look up one name after cleaning it."""
        key = clean_text(name)
        if key is None:
            return NameMatch(source=None)
        return NameMatch(source=key, targets=tuple(self._lookup.get(key, ())))

    def unmatched(self, names) -> list[str]:
        """Distinct cleaned names (in first-seen order) that have no entry."""
        seen: dict[str, None] = {}
        for name in names:
            key = clean_text(name)
            if key is not None and key not in self._lookup:
                seen[key] = None
        return list(seen)

    def ambiguous(self) -> dict[str, list[str]]:
        """Source names that map to more than one target."""
        return {
            source: list(targets)
            for source, targets in self._lookup.items()
            if len(targets) > 1
        }

    def left_join(
        self,
        dataframe: pd.DataFrame,
        key_column: str,
        target_column: str | None = None,
    ) -> pd.DataFrame:
        """
        Left-join a table to this mapping as an explicit cross product.

        Args:
            dataframe: Primary table.
            key_column: Column holding source-vocabulary names.
            target_column: Output column for the matched name
                           (defaults to the mapping's target column).

        Returns:
            New DataFrame with the cleaned key column and the target column
            appended.  One row per (row, target) pair; unmatched rows appear
            once with target None.
        """
        validate_columns(dataframe, [key_column], f"{self.label} join input")
        target_column = target_column or self.target_column

        columns = [c for c in dataframe.columns if c != target_column] + [target_column]
        rows: list[dict] = []
        unmatched_rows = 0

        for record in dataframe.to_dict("records"):
            match = self.match(record[key_column])
            record[key_column] = match.source

            if match.status is MatchStatus.UNMATCHED:
                unmatched_rows += 1
                rows.append({**record, target_column: None})
                continue

            for target in match.targets:
                rows.append({**record, target_column: target})

        if unmatched_rows:
            logger.info(f"[{self.label}] {unmatched_rows} rows without a match")

        return pd.DataFrame(rows, columns=columns)
