"""
Attribute name normalization.

Maps verbose source field names to the short names downstream
consumers expect. Renaming is best-effort: absent fields are skipped.
"""

from collections.abc import Iterable

import pandas as pd

from bclayers.utils.logging import get_logger

log = get_logger(__name__)


def rename_columns(
    df: pd.DataFrame,
    mapping: Iterable[tuple[str, str]],
) -> pd.DataFrame:
    """
    Rename columns using ordered (old, new) pairs.

    Pairs whose source column is absent are skipped silently. A pair is
    also skipped when its target already exists, so renaming an already
    normalized frame returns it unchanged.

    Args:
        df: DataFrame (or GeoDataFrame) to rename.
        mapping: Ordered (old, new) name pairs.

    Returns:
        DataFrame with renamed columns.
    """
    rename_dict: dict[str, str] = {}
    for old, new in mapping:
        if old not in df.columns or old == new:
            continue
        if new in df.columns or new in rename_dict.values():
            log.warning("Rename target already present, skipping", column=old, target=new)
            continue
        rename_dict[old] = new

    if rename_dict:
        log.debug("Renaming columns", renamed=list(rename_dict.keys()))
        df = df.rename(columns=rename_dict)

    return df


def missing_columns(df: pd.DataFrame, mapping: Iterable[tuple[str, str]]) -> list[str]:
    """Source columns of a mapping that are in neither raw nor renamed form."""
    return [
        old for old, new in mapping if old not in df.columns and new not in df.columns
    ]
