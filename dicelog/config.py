from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upper bounds applied when a notation is rolled. Parsing itself is unbounded.
    max_dice: int = 100
    max_sides: int = 1000
    # Rerolls allowed per die before an exploding chain is cut short.
    max_explosions: int = 100

    # Format used by the HTTP export endpoint when none is requested.
    default_export_format: str = "json"


settings = Settings()
