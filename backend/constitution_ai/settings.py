from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	# Model answering constitutional queries
	gemini_model: str = Field(default="gemini-3-flash-preview", validation_alias="GEMINI_MODEL")
	gemini_temperature: float = Field(default=0.1, validation_alias="GEMINI_TEMPERATURE")
	# Text-to-speech model and its prebuilt voice
	gemini_tts_model: str = Field(default="gemini-2.5-flash-preview-tts", validation_alias="GEMINI_TTS_MODEL")
	gemini_tts_voice: str = Field(default="Kore", validation_alias="GEMINI_TTS_VOICE")
	gemini_timeout_seconds: float = Field(default=30, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# Database holding the per-client key-value store
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	# Controllers kept in memory; older clients are reloaded from the database on demand
	max_cached_clients: int = Field(default=1000, validation_alias="MAX_CACHED_CLIENTS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	host: str = Field(default="127.0.0.1", validation_alias="HOST")
	port: int = Field(default=8000, validation_alias="PORT")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
