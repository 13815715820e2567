# medlink/client/config.py
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MEDLINK_", env_file=".env", extra="ignore")

    API_BASE_URL: str = Field(default="http://127.0.0.1:8000/api")
    SESSION_FILE: Path = Field(default=Path.home() / ".medlink" / "session.json")
    # Days offered by the booking date picker, starting today
    BOOKING_DAYS_AHEAD: int = Field(default=7, ge=1, le=60)


client_settings = ClientSettings()
