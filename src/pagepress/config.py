"""Configuration management for the PagePress export pipeline."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Render engine timeouts (seconds)
    launch_timeout: float = 30.0
    load_timeout: float = 30.0
    rasterize_timeout: float = 60.0

    # Page geometry
    page_format: str = "A4"
    margin_top: str = "20mm"
    margin_right: str = "15mm"
    margin_bottom: str = "20mm"
    margin_left: str = "15mm"
    print_background: bool = True

    # Headless browser flags
    engine_args: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

    # Batch export
    max_concurrency: int = 3
    fail_fast: bool = False
    archive_compression_level: int = 9

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def margins(self) -> dict[str, str]:
        """Page margins in the shape the render engine expects."""
        return {
            "top": self.margin_top,
            "right": self.margin_right,
            "bottom": self.margin_bottom,
            "left": self.margin_left,
        }

    class Config:
        env_prefix = "PAGEPRESS_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
