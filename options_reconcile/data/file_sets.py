from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from fnmatch import fnmatch
import logging
from pathlib import Path

import pandas as pd

from options_reconcile.data.extract_schemas import (
    CATEGORY_NAMES,
    DEFAULT_CATEGORY_PATTERNS,
    ExtractSchema,
    schema_for,
)
from options_reconcile.models import SOURCE_FILE_COLUMN


logger = logging.getLogger(__name__)


class FileSetLoadError(RuntimeError):
    def __init__(self, message: str, *, category: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.category = category
        self.path = path


@dataclass(frozen=True)
class LoaderConfig:
    data_directory: Path
    category_patterns: tuple[tuple[str, str], ...] = DEFAULT_CATEGORY_PATTERNS
    max_workers: int = 1


def _is_index_column(name: object) -> bool:
    text = str(name).strip()
    return not text or text.startswith("Unnamed:")


def _drop_leading_index_columns(df: pd.DataFrame) -> pd.DataFrame:
    drop: list[object] = []
    for col in df.columns:
        if not _is_index_column(col):
            break
        drop.append(col)
    if not drop:
        return df
    return df.drop(columns=drop)


def _clean_id(value: object) -> object:
    if isinstance(value, str):
        return value.strip() or None
    return value


def discover_files(data_directory: Path, pattern: str) -> list[Path]:
    """Files directly under ``data_directory`` whose name matches ``pattern``, sorted by name."""
    return sorted(
        (p for p in data_directory.iterdir() if p.is_file() and fnmatch(p.name, pattern)),
        key=lambda p: p.name,
    )


def empty_extract(schema: ExtractSchema) -> pd.DataFrame:
    columns = schema.canonical_columns + [SOURCE_FILE_COLUMN]
    return pd.DataFrame({col: pd.Series(dtype="object") for col in columns})


def read_extract(path: Path, schema: ExtractSchema) -> pd.DataFrame:
    """Read one delimited extract into the category's canonical shape."""
    try:
        raw = pd.read_csv(path, dtype=str)
    except Exception as exc:  # noqa: BLE001 - any parser/IO failure is fatal for the category
        raise FileSetLoadError(
            f"Failed to read {schema.category} extract: {path}",
            category=schema.category,
            path=path,
        ) from exc

    df = _drop_leading_index_columns(raw)
    df = df.rename(columns=schema.rename_map([str(c) for c in df.columns]))
    if schema.key_column not in df.columns:
        raise FileSetLoadError(
            f"Missing key column '{schema.key_column}' in {schema.category} extract: {path}",
            category=schema.category,
            path=path,
        )

    for col in schema.canonical_columns:
        if col not in df.columns:
            df[col] = None
    for col in schema.numeric_columns:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    for col in schema.id_columns:
        df[col] = df[col].map(_clean_id)
    df[SOURCE_FILE_COLUMN] = path.name

    extras = [c for c in df.columns if c not in schema.columns and c != SOURCE_FILE_COLUMN]
    return df[schema.canonical_columns + extras + [SOURCE_FILE_COLUMN]]


def load_category(data_directory: Path, category: str, pattern: str) -> pd.DataFrame:
    """Load and row-concatenate every file matching ``pattern`` for one category.

    Columns absent from a given file are null in its rows. No matching files
    yields an empty table with the declared columns.
    """
    schema = schema_for(category)
    files = discover_files(data_directory, pattern)
    if not files:
        logger.info("No files for category=%s pattern=%s", category, pattern)
        return empty_extract(schema)

    frames = [read_extract(path, schema) for path in files]
    out = pd.concat(frames, ignore_index=True, sort=False)
    leading = schema.canonical_columns
    extras = [c for c in out.columns if c not in leading and c != SOURCE_FILE_COLUMN]
    out = out[leading + extras + [SOURCE_FILE_COLUMN]]
    logger.info("Loaded category=%s files=%d rows=%d", category, len(files), len(out))
    return out


def _check_directory(data_directory: Path) -> None:
    if not data_directory.exists() or not data_directory.is_dir():
        raise FileSetLoadError(
            f"Data directory not found: {data_directory}",
            category="*",
            path=data_directory,
        )


def _check_categories(patterns: list[tuple[str, str]]) -> None:
    for name, _ in patterns:
        if name not in CATEGORY_NAMES:
            raise FileSetLoadError(
                f"Unknown extract category: {name} (expected one of {list(CATEGORY_NAMES)})",
                category=name,
            )


def load_file_sets(config: LoaderConfig) -> dict[str, pd.DataFrame]:
    """Load one table per configured category, keyed in ``category_patterns`` order.

    Any failing category aborts the whole load.
    """
    data_directory = Path(config.data_directory)
    _check_directory(data_directory)
    patterns = list(config.category_patterns)
    _check_categories(patterns)

    if config.max_workers <= 1 or len(patterns) <= 1:
        return {name: load_category(data_directory, name, pattern) for name, pattern in patterns}

    loaded: dict[str, pd.DataFrame] = {}
    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {
            executor.submit(load_category, data_directory, name, pattern): name
            for name, pattern in patterns
        }
        for fut in as_completed(futures):
            loaded[futures[fut]] = fut.result()
    return {name: loaded[name] for name, _ in patterns}


__all__ = [
    "FileSetLoadError",
    "LoaderConfig",
    "discover_files",
    "empty_extract",
    "load_category",
    "load_file_sets",
    "read_extract",
]
