from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Database — optional; unset means in-memory only mode
    DATABASE_URL: str | None = None

    # JWT — no default, MUST be set in .env
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 30

    # Simulation clocks (seconds)
    PRICE_TICK_SECONDS: float = 10.0
    GAME_EVENT_TICK_SECONDS: float = 60.0
    FLASH_SWEEP_SECONDS: float = 5.0
    MARKET_DATA_TICK_SECONDS: float = 45.0
    FLASH_MULTIPLIER_SECONDS: float = 30.0
    RANDOM_EVENT_PROBABILITY: float = 0.4
    AUTOSTART_SIMULATION: bool = True

    # Trading
    STARTING_BALANCE: float = 10_000.0
    LIVE_TRADES_PER_SESSION: int = 5
    LIMIT_ORDER_TTL_HOURS: int = 24
    APPLY_MARKET_IMPACT: bool = True

    # Fan-out
    SUBSCRIBER_QUEUE_SIZE: int = 256

    # App
    APP_NAME: str = "Player Stock Market"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
