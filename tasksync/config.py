"""Application configuration"""

from pydantic_settings import BaseSettings

from tasksync.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings"""

    # Source (Monorail)
    source_project: str = "tint"
    monorail_host: str = "api-dot-monorail-prod.appspot.com"
    monorail_token: str | None = None
    # Display name of the custom field holding the estimate in hours.
    monorail_estimate_field: str = "EstimateTime"

    # Target (Hansoft)
    target_project: str = "tint"
    target_host: str = "localhost"
    target_port: int = 50256
    target_database: str = "Tint"
    target_auth_file: str = "hansoft-auth.json"
    # Import path ("package.module:callable") of the factory opening a target session.
    # Called as factory(settings, credentials) and must return a TargetSession.
    target_session_factory: str | None = None
    # Upper bound of calls waiting on the target session worker.
    session_queue_size: int = 256

    # Correlation
    # Prefix of the hyperlink written on every synced task. When omitted it is
    # derived from the source project: "crbug.com/<source_project>/".
    correlation_prefix: str | None = None
    # Comma-separated pair of email domains under which the same account may be registered.
    email_domains: str = "google.com,chromium.org"

    # Sync
    sync_interval_minutes: int = 10
    dry_run: bool = False

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def resolved_correlation_prefix(self) -> str:
        """Prefix used to build and recognize correlation keys"""
        if self.correlation_prefix:
            return self.correlation_prefix
        return f"crbug.com/{self.source_project}/"

    def email_domain_pair(self) -> tuple[str, str]:
        """The two interchangeable email domains, without the '@'"""
        parts = [p.strip().lstrip("@") for p in self.email_domains.split(",") if p.strip()]
        if len(parts) != 2:
            raise ConfigurationError(
                f"EMAIL_DOMAINS must name exactly two domains, got '{self.email_domains}'"
            )
        return parts[0], parts[1]


settings = Settings()
