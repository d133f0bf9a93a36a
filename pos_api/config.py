from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "tcg_pos"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    database_url_override: Optional[str] = None

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # uploads
    upload_dir: str = "uploads"
    storage_backend: str = "local"  # local | r2
    r2_account_id: Optional[str] = None
    r2_access_key_id: Optional[str] = None
    r2_secret_access_key: Optional[str] = None
    r2_bucket_name: Optional[str] = None
    max_payment_proof_size: int = 5 * 1024 * 1024
    max_product_image_size: int = 2 * 1024 * 1024

    # orders
    default_payment_method: str = "BANK_TRANSFER"
    enforce_stock_on_completion: bool = False

    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    master_admin_username: Optional[str] = None
    master_admin_password: Optional[str] = None

    @property
    def database_url(self):
        if self.database_url_override:
            return self.database_url_override
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
