import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JSON_SORT_KEYS = False

    # Backend REST API. BACKEND_URL wins when set, otherwise it is assembled
    # from host/port the same way the workspace ip config does.
    BACKEND_URL = os.getenv("BACKEND_URL", "")
    BACKEND_HOST = os.getenv("BACKEND_HOST", "localhost")
    BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8082"))
    BACKEND_API_PREFIX = os.getenv("BACKEND_API_PREFIX", "/api/v1")
    BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "10"))

    # Quiescence interval for the search box
    SEARCH_DEBOUNCE_MS = int(os.getenv("SEARCH_DEBOUNCE_MS", "500"))

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))

    @classmethod
    def backend_endpoint(cls) -> str:
        if cls.BACKEND_URL:
            return cls.BACKEND_URL.rstrip("/")
        return f"http://{cls.BACKEND_HOST}:{cls.BACKEND_PORT}{cls.BACKEND_API_PREFIX}"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    BACKEND_URL = "http://backend.test/api/v1"
    BACKEND_TIMEOUT = 1.0
    SEARCH_DEBOUNCE_MS = 10
