"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Leadline"
    brand_name: str = "NAKO Agency"
    debug: bool = False
    api_prefix: str = "/api"
    cors_origins: list[str] = ["*"]

    # Email notifications (SMTP)
    smtp_host: str = "smtp.fastmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = False  # implicit TLS (port 465); STARTTLS is negotiated otherwise
    notification_email: str = "leads@nakoagency.com"
    from_email: str = "NAKO Agency <hello@nakoagency.com>"

    # Telegram notifications
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_api_url: str = "https://api.telegram.org"

    # Dispatch
    channel_send_timeout: float = 10.0

    # Lead log (development / fallback record of received leads)
    log_leads_to_file: bool = False
    leads_file_path: str = "data/leads.json"

    # Form client
    lead_endpoint_url: str = "http://localhost:8000/api/lead"
    submission_timeout: float = 15.0
    draft_debounce_seconds: float = 0.5
    draft_dir: str = ".drafts"

    model_config = {"env_file": ".env", "env_prefix": "LEADLINE_"}


settings = Settings()
