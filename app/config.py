# app/config.py


from dotenv import load_dotenv
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # read .env before Settings so plain os.getenv callers see it too

BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    # environment
    app_env: str = "local"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # database (Supabase Postgres in production)
    database_url: str                        # DATABASE_URL

    # Supabase auth / storage
    supabase_url: str | None = None          # SUPABASE_URL
    supabase_service_role_key: str | None = None
    supabase_jwt_secret: str                 # SUPABASE_JWT_SECRET
    supabase_jwt_audience: str = "authenticated"
    supabase_issuer: str | None = None

    # slides
    slides_bucket: str = "slides"
    max_pdf_pages: int = 50
    render_dpi: int = 120  # crisp enough for projection, keeps PNGs small
    render_timeout: float = 120  # seconds per pdfinfo / pdftoppm call

    # sessions
    join_code_attempts: int = 10

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()

if __name__ == "__main__":
    print("BASE_DIR:", BASE_DIR)
    print("DATABASE_URL:", settings.database_url)
    print("SUPABASE_URL:", settings.supabase_url)
