from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Hosted backend (auth + project_submissions table)
	supabase_url: str | None = Field(default=None, validation_alias="SUPABASE_URL")
	supabase_anon_key: str | None = Field(default=None, validation_alias="SUPABASE_ANON_KEY")
	http_timeout_seconds: float = Field(default=30, validation_alias="HTTP_TIMEOUT_SECONDS")

	# Access tokens are issued by the hosted auth provider and verified locally
	jwt_secret_key: str = Field(default="change-me", validation_alias="SUPABASE_JWT_SECRET")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	jwt_audience: str = Field(default="authenticated", validation_alias="JWT_AUDIENCE")

	# Where projects are saved: "sql" (local database) or "supabase"
	project_store: str = Field(default="sql", validation_alias="PROJECT_STORE")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Years shown on the dashboard projection
	projection_years: int = Field(default=100, validation_alias="PROJECTION_YEARS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def supabase_configured(self) -> bool:
		return bool(self.supabase_url and self.supabase_anon_key)

settings = Settings()
