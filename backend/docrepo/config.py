# backend/docrepo/config.py
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./docrepo.db"  # Default if not in .env

    # Object storage
    STORAGE_PATH: Path = Path("storage")
    DOCUMENTS_BUCKET: str = "documents"
    COVERS_BUCKET: str = "covers"
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    SIGNING_SECRET: str = "change-me"
    SIGNED_URL_TTL: int = 60 * 30  # seconds

    # Upload guardrails
    MAX_DOCUMENT_SIZE: int = 10 * 1024 * 1024
    MAX_COVER_SIZE: int = 2 * 1024 * 1024

    # Auth
    JWT_SECRET: str = "change-me-too"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL: int = 60 * 60  # seconds
    DEFAULT_ADMIN_EMAIL: str | None = None
    DEFAULT_ADMIN_PASSWORD: str | None = None

    # Dashboards
    RECENT_DAYS: int = 7
    LATEST_LIMIT: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context) -> None:
        """Post initialization hook to set derived paths"""
        if isinstance(self.STORAGE_PATH, str):
            self.STORAGE_PATH = Path(self.STORAGE_PATH)

        self.create_storage_dirs()

    @property
    def buckets(self) -> tuple[str, str]:
        return (self.DOCUMENTS_BUCKET, self.COVERS_BUCKET)

    def bucket_path(self, bucket: str) -> Path:
        return self.STORAGE_PATH / "buckets" / bucket

    def create_storage_dirs(self) -> None:
        """Create the storage root, log directory and bucket directories"""
        for path in [self.STORAGE_PATH, self.STORAGE_PATH / "logs", *map(self.bucket_path, self.buckets)]:
            path.mkdir(parents=True, exist_ok=True)

settings = Settings()
