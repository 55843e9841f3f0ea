from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Combat Tracker API"
    database_url: str = "sqlite:///./combat_tracker.db"
    debug: bool = False
    log_level: str = "INFO"

    # Combat defaults
    default_lair_action_initiative: int = 20
    default_log_limit: int = 20
    max_log_limit: int = 100

    class Config:
        env_file = ".env"
        env_prefix = "COMBAT_TRACKER_"


settings = Settings()
