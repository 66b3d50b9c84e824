from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    host: str = "127.0.0.1"
    port: int = 8001

    database_url: str = "sqlite:///./reclaim.db"
    database_echo: bool = False           # log every SQL statement
    sqlite_wal: bool = True
    sqlite_busy_timeout_ms: int = 30000

    # Matching
    match_threshold: int = 60             # minimum score for a candidate to count as a match
    notify_min_score: int = 60            # minimum score for a match notification
    max_matches: int = 5                  # matches kept per new item

    # Notifications
    max_daily_notifications: int = 10     # per recipient, per fan-out
    broadcast_enabled: bool = True        # "new item reported" fan-out to every user
    location_alerts_enabled: bool = True
    location_alert_min_reports: int = 3   # reports needed at a location before alerting
    location_risk_threshold: int = 60     # loss % above which a location alert is sent
    notification_retention_days: int = 90

    # Hotspot monitor
    hotspot_monitor_enabled: bool = True
    hotspot_refresh_interval: int = 3600  # seconds

    # Webhook
    webhook_url: str = ""
    webhook_type: str = "discord"  # discord / slack / generic

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.webhook_url)

    # Auth
    api_key: str = ""  # Set to enable API key auth; empty = no auth
    admin_emails: str = ""  # comma-separated; these accounts get admin rights on registration

    @property
    def admin_email_set(self) -> set[str]:
        return {e.strip().lower() for e in self.admin_emails.split(",") if e.strip()}

    # Log
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
