# src/provider_kernel/config/base_settings.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Registry files follow `<Module>.registry.py` or `<module>_registry.py`
DEFAULT_PATTERNS: List[str] = ["**/*.registry.py", "**/*_registry.py"]


class DiscoverySettings(BaseSettings):
    """
    Provider discovery settings, read from PK_DISCOVERY_* env vars and `.env`.
    Each app can subclass and extend it.

    List values are given as JSON in the environment:
        PK_DISCOVERY_ROOTS='["app", "plugins"]'
    """

    roots: List[str] = ["app"]
    patterns: List[str] = list(DEFAULT_PATTERNS)
    strict: bool = False
    log_level: str = "INFO"
    app_name: str = "Product App"

    model_config = SettingsConfigDict(
        env_prefix="PK_DISCOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
