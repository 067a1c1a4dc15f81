import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Hosted backend (auth + rows). Both are required: startup fails without them.
    BACKEND_URL: str
    BACKEND_ANON_KEY: str
    BACKEND_TIMEOUT_SECONDS: float = 30.0

    PRIVILEGED_ROLE: str = "hr_manager"
    WORKSPACE_COOKIE: str = "rh_docs_workspace"
    # Idle workspaces are closed after this long; the live count is capped.
    WORKSPACE_IDLE_SECONDS: int = 1800
    WORKSPACE_MAX_LIVE: int = 1000

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
