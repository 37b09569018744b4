from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    extraction_provider: str = "openai"
    extraction_max_tokens: int = 12000
    extraction_ocr_enabled: bool = True
    extraction_ocr_timeout_seconds: int = 60
    extraction_main_timeout_seconds: int = 60

    default_confidence_threshold: int = 65

    extraction_openai_api_key: str = ""
    extraction_openai_model_name: str = "gpt-4o"
    extraction_openai_timeout_seconds: int = 60
    extraction_openai_temperature: float = 0.0

    extraction_openai_compatible_api_key: str = ""
    extraction_openai_compatible_model_name: str = ""
    extraction_openai_compatible_base_url: str = ""
    extraction_openai_compatible_timeout_seconds: int = 60

    extraction_gemini_api_key: str = ""
    extraction_gemini_model_name: str = "gemini-2.5-pro"
    extraction_gemini_timeout_seconds: int = 60

    extraction_openrouter_api_key: str = ""
    extraction_openrouter_model_name: str = ""
    extraction_openrouter_timeout_seconds: int = 60

    extraction_ollama_api_key: str = ""
    extraction_ollama_model_name: str = ""
    extraction_ollama_timeout_seconds: int = 120
