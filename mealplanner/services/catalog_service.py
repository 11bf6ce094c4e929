from mealplanner.core.config import EngineConfig
from mealplanner.core.logging_config import get_logger
from mealplanner.services.catalogs.base import RecipeCatalog
from mealplanner.services.catalogs.local import LocalCatalog
from mealplanner.services.catalogs.remote import HttpRecipeCatalog

logger = get_logger(__name__)


def build_catalog(config: EngineConfig) -> RecipeCatalog:
    """Create the recipe catalog selected by `catalog_backend`."""
    if config.catalog_backend == "http":
        if not config.catalog_url:
            raise ValueError("catalog_url must be set when catalog_backend is 'http'")
        logger.info(f"Using remote recipe catalog at {config.catalog_url}")
        return HttpRecipeCatalog(config.catalog_url, timeout_seconds=config.catalog_timeout_seconds)

    logger.info(f"Using local recipe catalog from {config.catalog_path}")
    return LocalCatalog(
        file_path=config.catalog_path,
        auto_refresh=config.catalog_auto_refresh
    )
