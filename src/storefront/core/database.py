import logging

from tortoise import Tortoise

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

MODEL_MODULES = [
    "storefront.features.catalog.models",
    "storefront.features.customers.models",
    "storefront.features.invoices.models",
    "aerich.models",  # For Aerich migrations
]


def build_tortoise_config(db_url: str = DATABASE_URL) -> dict:
    """Builds the Tortoise-ORM configuration for the transaction store."""
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }


# Referenced by [tool.aerich] in pyproject.toml
TORTOISE_ORM_CONFIG = build_tortoise_config()


class DBConnection:
    """Async context manager that opens the store for callers outside a request cycle."""

    def __init__(self, db_url: str = DATABASE_URL, generate_schemas: bool = False):
        self.db_url = db_url
        self.generate_schemas = generate_schemas

    async def __aenter__(self):
        await Tortoise.init(config=build_tortoise_config(self.db_url))
        logger.info("Tortoise-ORM has been initialized.")
        if self.generate_schemas:
            await Tortoise.generate_schemas(safe=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await Tortoise.close_connections()
        logger.info("Tortoise-ORM connections have been closed.")
