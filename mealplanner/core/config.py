import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from mealplanner.core.logging_config import get_logger

load_dotenv()

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PREFIX = "MEALPLANNER_"
ALLERGY_MODES = {"include", "exclude"}
CATALOG_BACKENDS = {"local", "http"}


@dataclass(frozen=True)
class EngineConfig:
    top_up_page_size: int = 100
    max_amount: int = 50
    max_days: int = 31
    allergy_mode: str = "include"
    catalog_backend: str = "local"
    catalog_path: str = "data/recipes.json"
    catalog_url: Optional[str] = None
    catalog_timeout_seconds: int = 5
    catalog_auto_refresh: bool = True


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_choice(value: Any, choices: set, default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()
    if value is not None:
        logger.warning(f"Ignoring unsupported config value {value!r}; using {default!r}")
    return default


def _config_path() -> Path:
    return PROJECT_ROOT / "config" / "engine_config.json"


def _resolve_path(path: str) -> str:
    """Anchor a relative path at the project root."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str(PROJECT_ROOT / candidate)


def _from_mapping(data: Dict[str, Any], base: EngineConfig) -> EngineConfig:
    page_size = _as_int(data.get("top_up_page_size"), base.top_up_page_size)
    return EngineConfig(
        top_up_page_size=page_size if page_size > 0 else base.top_up_page_size,
        max_amount=_as_int(data.get("max_amount"), base.max_amount),
        max_days=_as_int(data.get("max_days"), base.max_days),
        allergy_mode=_as_choice(data.get("allergy_mode"), ALLERGY_MODES, base.allergy_mode),
        catalog_backend=_as_choice(data.get("catalog_backend"), CATALOG_BACKENDS, base.catalog_backend),
        catalog_path=str(data.get("catalog_path") or base.catalog_path),
        catalog_url=data.get("catalog_url") or base.catalog_url,
        catalog_timeout_seconds=_as_int(data.get("catalog_timeout_seconds"), base.catalog_timeout_seconds),
        catalog_auto_refresh=_as_bool(data.get("catalog_auto_refresh"), base.catalog_auto_refresh)
    )


def _env_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for field_name in EngineConfig.__dataclass_fields__:
        value = os.getenv(ENV_PREFIX + field_name.upper())
        if value is not None:
            overrides[field_name] = value
    return overrides


def load_engine_config(path: Optional[Path] = None) -> EngineConfig:
    """Load engine settings from the JSON config file, then apply MEALPLANNER_* env overrides."""
    config_path = path or _config_path()
    config = EngineConfig()
    try:
        data: Dict[str, Any] = json.loads(config_path.read_text(encoding="utf-8"))
        config = _from_mapping(data, config)
    except FileNotFoundError:
        pass
    except json.JSONDecodeError as exc:
        logger.warning(f"Invalid engine config JSON at {config_path}: {exc}")

    overrides = _env_overrides()
    if overrides:
        config = _from_mapping(overrides, config)
    return replace(config, catalog_path=_resolve_path(config.catalog_path))
