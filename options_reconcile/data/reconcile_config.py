from __future__ import annotations

import json
from pathlib import Path

import yaml
from jsonschema import Draft202012Validator

from options_reconcile.data.extract_schemas import CATEGORY_NAMES, DEFAULT_CATEGORY_PATTERNS
from options_reconcile.data.file_sets import LoaderConfig


class ConfigError(ValueError):
    pass


DEFAULT_CONFIG_PATH = Path("config/reconcile.yaml")
DEFAULT_SCHEMA_PATH = Path("config/reconcile.schema.json")


def load_reconcile_config(
    config_path: Path | str = DEFAULT_CONFIG_PATH,
    schema_path: Path | str = DEFAULT_SCHEMA_PATH,
    *,
    data_directory: Path | str | None = None,
) -> LoaderConfig:
    """Read the YAML run config; ``data_directory`` overrides the file's value."""
    config_path = Path(config_path)
    schema_path = Path(schema_path)

    if not config_path.exists():
        raise ConfigError(f"Missing config file: {config_path}")
    if not schema_path.exists():
        raise ConfigError(f"Missing schema file: {schema_path}")

    with config_path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if not isinstance(cfg, dict):
        raise ConfigError("Reconcile config is empty or invalid.")

    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)

    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(cfg), key=lambda e: [str(p) for p in e.path])
    if errors:
        messages = []
        for err in errors[:10]:
            loc = ".".join(str(p) for p in err.path) or "<root>"
            messages.append(f"{loc}: {err.message}")
        raise ConfigError("Reconcile config schema validation failed: " + "; ".join(messages))

    _light_validate(cfg)
    return loader_config_from_dict(cfg, data_directory=data_directory)


def _light_validate(cfg: dict) -> None:
    categories = cfg.get("categories") or []
    names = [str(c.get("name")) for c in categories]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ConfigError(f"Duplicate category names: {dupes}")
    unknown = [n for n in names if n not in CATEGORY_NAMES]
    if unknown:
        raise ConfigError(f"Unknown categories: {unknown} (expected one of {list(CATEGORY_NAMES)})")
    if int(cfg.get("max_workers", 1)) < 1:
        raise ConfigError("max_workers must be >= 1")


def loader_config_from_dict(
    cfg: dict,
    *,
    data_directory: Path | str | None = None,
) -> LoaderConfig:
    categories = cfg.get("categories")
    if categories:
        patterns = tuple((str(c["name"]), str(c["pattern"])) for c in categories)
    else:
        patterns = DEFAULT_CATEGORY_PATTERNS

    directory = data_directory if data_directory is not None else cfg.get("data_directory")
    if directory is None:
        raise ConfigError("data_directory is required (config file or --data-dir)")

    return LoaderConfig(
        data_directory=Path(directory),
        category_patterns=patterns,
        max_workers=int(cfg.get("max_workers", 1)),
    )
