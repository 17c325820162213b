"""Configuration settings for the fixture loader."""

from pathlib import Path

from pydantic_settings import BaseSettings

MEMORY_PATH = ":memory:"


def _default_data_dir() -> Path:
    """Get default data directory (~/.doc-fixtures/)."""
    return Path.home() / ".doc-fixtures"


class Settings(BaseSettings):
    """Fixture loader configuration.

    Environment variables:
    - DATA_DIR: Directory for the fixture database (default: ~/.doc-fixtures)
    - FIXTURES_DB_PATH: Database file, or ":memory:" for an in-memory store
        (default: <DATA_DIR>/fixtures.db)
    - FIXTURES_OVERWRITE: Replace documents whose URI already exists instead
        of reporting them as failures (default: false)
    - FIXTURES_CLEAR: Remove the fixture collections before loading
        (default: false)
    - LOG_LEVEL: Loguru level for stderr output (default: INFO)
    """

    # Storage
    data_dir: str = ""  # Default: ~/.doc-fixtures
    fixtures_db_path: str = ""  # Default: <data_dir>/fixtures.db

    # Load behaviour
    fixtures_overwrite: bool = False
    fixtures_clear: bool = False

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}

    def get_data_dir(self) -> Path:
        """Get data directory.

        Uses DATA_DIR if set, otherwise ~/.doc-fixtures/.
        """
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return _default_data_dir()

    def is_memory(self) -> bool:
        """True when the store should live only in memory."""
        return self.fixtures_db_path.strip() == MEMORY_PATH

    def get_db_path(self) -> Path | str:
        """Get resolved fixture database path (or ":memory:")."""
        if self.is_memory():
            return MEMORY_PATH
        if self.fixtures_db_path:
            return Path(self.fixtures_db_path).expanduser()
        return self.get_data_dir() / "fixtures.db"


settings = Settings()
