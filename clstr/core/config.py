from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SECRET_KEY: str
    SUPABASE_URL: str
    SUPABASE_SERVICE_KEY: str = ""

    VAPID_PUBLIC_KEY: str | None = None
    VAPID_PRIVATE_KEY: str | None = None
    VAPID_SUBJECT: str = "mailto:support@clstr.network"

    # "memory" keeps every table in-process (local development, tests)
    STORE_BACKEND: Literal["supabase", "memory"] = "supabase"

    MENTORSHIP_EXPIRY_DAYS: int = 14
    SLOT_UPDATE_RETRIES: int = 5

    LOG_LEVEL: str = "INFO"

    @property
    def AVATAR_BUCKET_URL(self) -> str:
        return f"{self.SUPABASE_URL}/storage/v1/object/public/avatars/"

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
