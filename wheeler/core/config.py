from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # =========================================================================
    # Portfolio Databases
    # =========================================================================
    # Directory holding one SQLite file per portfolio
    DATA_DIR: str = "./data"

    # Pointer file (inside DATA_DIR) naming the active portfolio database
    CURRENT_DB_FILE: str = "currentdb"

    # Database used when the pointer file is missing or empty
    DEFAULT_DB_NAME: str = "wheeler.db"

    # SQLite busy timeout in milliseconds (default: 10000)
    SQLITE_BUSY_TIMEOUT_MS: int = 10000

    # =========================================================================
    # Snapshot Settings
    # =========================================================================
    # Days backfilled by the snapshot CLI when --days is omitted (default: 1, today only)
    DEFAULT_SNAPSHOT_DAYS: int = 1

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
