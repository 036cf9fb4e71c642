"""
HeaderDetector: locate the header row of a flat sheet and map each
category field to a column.

Matching is driven purely by the category schema (labels and aliases),
compared in the compact form produced by
:meth:`DataCleaner.normalize_header`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set, Tuple

from filmdb.ir import CategoryDefinition, FieldDefinition
from filmdb.workbook.config import DEFAULT_CONFIG, ReaderConfig
from filmdb.workbook.data_cleaner import DataCleaner


class HeaderDetector:
    """
    Stateless detector; an :class:`ReaderConfig` can be passed in to
    override the scan depth.
    """

    def __init__(self, cfg: ReaderConfig = DEFAULT_CONFIG):
        self._cfg = cfg

    @staticmethod
    def build_alias_set(category: CategoryDefinition) -> Set[str]:
        """Every label and alias of *category*, normalised."""
        aliases: Set[str] = set()
        for f in category.fields:
            for text in f.header_texts():
                aliases.add(DataCleaner.normalize_header(text))
        return aliases

    def select_header_row_index(
        self,
        grid: Sequence[Sequence[str]],
        category: CategoryDefinition,
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Scan the first *N* rows and return ``(best_idx, debug_info)``.

        The header is the row with the most cells matching a known label or
        alias; the earliest row wins ties, and row 0 is returned when nothing
        matches at all.
        """
        alias_set = self.build_alias_set(category)
        scan = min(self._cfg.header_scan_rows, len(grid))
        best_idx = 0
        best_score = -1
        scores: List[int] = []
        for i in range(scan):
            score = sum(1 for cell in grid[i] if DataCleaner.normalize_header(cell) in alias_set)
            scores.append(score)
            if score > best_score:
                best_score = score
                best_idx = i
        return best_idx, {
            "scanned_rows": scan,
            "row_scores": scores,
            "chosen_header_row_idx": best_idx,
            "chosen_score": max(best_score, 0),
        }

    @staticmethod
    def resolve_column_index(
        header_row: Sequence[str],
        field: FieldDefinition,
        fallback_index: int,
    ) -> int:
        """Exact label match, else first alias match (in alias order), else *fallback_index*."""
        normalized = [DataCleaner.normalize_header(c) for c in header_row]
        for text in field.header_texts():
            target = DataCleaner.normalize_header(text)
            if target in normalized:
                return normalized.index(target)
        return fallback_index

    def resolve_columns(
        self,
        header_row: Sequence[str],
        category: CategoryDefinition,
    ) -> Dict[str, int]:
        """Map every field key of *category* to a column index."""
        return {
            f.key: self.resolve_column_index(header_row, f, idx)
            for idx, f in enumerate(category.fields)
        }
