from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timezone: str = "America/Lima"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    request_timeout_sec: float = 10.0
    sqlite_path: str = "data/demo.db"
    demo_user_id: str = "demo-user-123"
    streak_path: str = "data/streak.json"
    log_path: str = "logs/app.log"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def remote_enabled(self) -> bool:
        return bool(self.supabase_url.strip() and self.supabase_anon_key.strip())


settings = Settings()
