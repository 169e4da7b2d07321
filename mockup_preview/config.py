import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    BASE_DIR = Path(__file__).resolve().parent.parent
    DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
    ASSETS_DIR = BASE_DIR / "assets"
    TEMPLATES_DIR = ASSETS_DIR / "mockups"
    DESIGNS_DIR = Path(os.getenv("DESIGNS_DIR", ASSETS_DIR / "designs"))
    GENERATED_MOCKUPS_DIR = BASE_DIR / "generated_mockups"
    ALLOWED_EXTS = {".png", ".jpg", ".jpeg", ".webp"}

    IMAGE_FETCH_TIMEOUT = float(os.getenv("IMAGE_FETCH_TIMEOUT", "30"))
    PREVIEW_MAX_WORKERS = int(os.getenv("PREVIEW_MAX_WORKERS", "4"))
    PROXY_ALLOWED_DOMAINS = _csv(os.getenv(
        "PROXY_ALLOWED_DOMAINS",
        "printful-upload.s3-accelerate.amazonaws.com,printful.s3.amazonaws.com,s3.amazonaws.com,supabase.co",
    ))
    # Hosts the preview endpoints may fetch templates and designs from
    IMAGE_ALLOWED_DOMAINS = _csv(os.getenv("IMAGE_ALLOWED_DOMAINS", ",".join(PROXY_ALLOWED_DOMAINS)))


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False
