from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "HR Payroll Backend"
    APP_VERSION: str = "1.0.0"

    # Database URL (read from .env file)
    DATABASE_URL: str = ''

    # Echo every SQL statement to the log
    SQL_ECHO: bool = False

    # Logging level for the hr_backend logger tree
    LOG_LEVEL: str = 'INFO'

    # JWT settings used to decode the caller identity
    JWT_SECRET_KEY: str = 'default-secret-key-change-in-production'
    JWT_ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Client URL for CORS
    CLIENT_URL: str = 'http://localhost:3000'

    model_config = SettingsConfigDict(env_file=".env", extra='allow')

    @property
    def DB_URL(self) -> str:
        if self.ENV_MODE == "dev":
            return self.DEV_DB_URL
        if self.DATABASE_URL:
            return self.DATABASE_URL

        missing = [name for name in ("DB_HOST", "DB_NAME") if not getattr(self, name)]
        if missing:
            raise ValueError(
                f"DATABASE_URL is empty and {', '.join(missing)} not set; "
                "cannot build the production database URL"
            )
        credentials = self.DB_USERNAME
        if self.DB_PASS:
            credentials = f"{credentials}:{self.DB_PASS}"
        if credentials:
            credentials = f"{credentials}@"
        return f"{self.DB_ENGINE}://{credentials}{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def API_BASE_URL(self) -> str:
        if self.ENV_MODE == "dev":
            return 'http://localhost:8000/'
        return self.HOST_URL

class DevSettings(Settings):
    # Environment mode: 'dev' or 'prod'
    ENV_MODE: str = 'dev'

    @property
    def DEV_DB_URL(self) -> str:
        # Use DATABASE_URL from .env when given, otherwise a local SQLite file
        return self.DATABASE_URL if self.DATABASE_URL else "sqlite:///./dev.db"

    model_config = SettingsConfigDict(env_file=".env", extra='allow')

class ProdSettings(Settings):
    # Environment mode: 'dev' or 'prod'
    ENV_MODE: str = 'prod'

    # Database settings for production
    DB_ENGINE: str = 'postgresql+psycopg'
    DB_USERNAME: str = ''
    DB_PASS: str = ''
    DB_HOST: str = ''
    DB_PORT: str = '5432'
    DB_NAME: str = ''

    # Public URL of the deployed API
    HOST_URL: str = ''

    model_config = SettingsConfigDict(env_file=".env", extra='allow')

def get_settings(env_mode: str = "dev"):
    if env_mode == "dev":
        return DevSettings()
    return ProdSettings()
