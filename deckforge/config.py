from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    # --- HTTP service ---
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    cors_origins: tuple[str, ...] = _env_list("CORS_ORIGINS", "*")
    # JSON bodies up to 50 MB.
    max_body_bytes: int = int(os.getenv("MAX_BODY_BYTES", str(50 * 1024 * 1024)))

    # --- Images ---
    image_fetch_timeout: float = float(os.getenv("IMAGE_FETCH_TIMEOUT", "15"))
    image_user_agent: str = os.getenv("IMAGE_USER_AGENT", "deckforge/1.0")
    # Downloads larger than this are abandoned.
    image_max_bytes: int = int(os.getenv("IMAGE_MAX_BYTES", str(50 * 1024 * 1024)))

    # --- Document metadata / styling ---
    default_author: str = os.getenv("DEFAULT_AUTHOR", "HTML to PPTX Converter")
    default_company: str = os.getenv("DEFAULT_COMPANY", "")
    # DEFAULT_THEME can be: MASTER_SLIDE | DARK_MASTER | GRADIENT_MASTER (or plain | dark | gradient)
    default_theme: str = os.getenv("DEFAULT_THEME", "MASTER_SLIDE")

    output_dir: str = os.getenv("OUTPUT_DIR", "output")

    # --- Logging ---
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    debug_images: bool = _env_flag("DEBUG_IMAGES")


settings = Settings()


def configure_logging(cfg: Settings | None = None) -> None:
    cfg = cfg or settings
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if cfg.debug_images:
        logging.getLogger("deckforge.images").setLevel(logging.DEBUG)
