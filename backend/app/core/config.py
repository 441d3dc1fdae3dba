from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Workspace Collab"
    API_V1_STR: str = "/api/v1"

    MONGODB_URL: str
    DATABASE_NAME: str = "workspace_collab"

    # Redis holds the token blacklist (logout / revocation)
    REDIS_URL: str = "redis://localhost:6379/0"
    TOKEN_BLACKLIST_PREFIX: str = "wc:blacklist:"
    TOKEN_BLACKLIST_TTL_SECONDS: int = 60 * 60 * 24

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Generative backends (primary: Groq, secondary: Gemini)
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "llama-3.3-70b-versatile"
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GOOGLE_AI_KEY: str = ""
    GEMINI_MODEL: str = "gemini-flash-latest"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"

    # AI orchestration
    AI_MENTION_TOKEN: str = "@ai"
    AI_MAX_RETRIES: int = 2
    AI_RETRY_BASE_SECONDS: float = 2.0
    AI_RETRY_MAX_SECONDS: float = 30.0
    AI_REQUEST_TIMEOUT_SECONDS: float = 60.0
    AI_TEMPERATURE: float = 0.4
    AI_MAX_TOKENS: int = 8192

    # Frontend origins allowed to send credentials
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:3000",
    ]
    COOKIE_SECURE: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
