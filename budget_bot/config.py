from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    validate_twilio_signature: bool = False
    public_webhook_url: str = ""  # URL Twilio signs; set when running behind a proxy

    google_sheets_spreadsheet_id: str = ""  # empty disables spreadsheet logging
    google_sheets_sheet_name: str = "Log"
    google_service_account_file: str = "service_account.json"

    whisper_model: str = "base"
    whisper_device: str = "cpu"
    whisper_compute_type: str = "int8"

    anthropic_api_key: str = ""
    model_name: str = "claude-haiku-4-5-20251001"

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()
