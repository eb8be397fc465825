"""
Application configuration management.
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Grammar sources
    grammars_file: Path = Path("grammars.yaml")
    build_root: Path = Path("build/test")
    descriptor_filename: str = "grammar.js"

    # ABNF parser (tree-sitter-abnf compiled as a shared library)
    abnf_language_library: Path = Path("build/abnf.so")
    abnf_language_name: str = "abnf"

    # Parser generator
    generator_command: List[str] = ["tree-sitter", "generate"]
    max_attempts: Optional[int] = None  # None retries until no fix applies

    # Application
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "ABNF_TS_"
        case_sensitive = False


# Global settings instance
settings = Settings()
