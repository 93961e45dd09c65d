"""FastAPI dependencies for dependency injection."""

from gamification.config import Config
from gamification.datasources import DataSource

# Global instances - initialized at app startup
_datasource: DataSource | None = None
_config: Config | None = None


def set_datasource(datasource: DataSource) -> None:
    """Set the global datasource instance."""
    global _datasource
    _datasource = datasource


def get_datasource() -> DataSource:
    """Get the global datasource instance for dependency injection."""
    if _datasource is None:
        raise RuntimeError("DataSource not initialized. Call set_datasource() first.")
    return _datasource


def set_config(config: Config) -> None:
    """Set the global config instance."""
    global _config
    _config = config


def get_config() -> Config:
    """Get the active config, falling back to the environment."""
    if _config is None:
        return Config.from_env()
    return _config
