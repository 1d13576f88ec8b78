"""
Application configuration.

Defaults can be overridden with EDUSOLVER_* environment variables.
The Gemini API key is deliberately not part of the config: it is
entered per session and kept in memory only.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Mapping


DEFAULT_MODEL = "gemini-flash-lite-latest"
DEFAULT_LANGUAGE = "Bahasa Indonesia"
DEFAULT_DATA_DIR = Path.home() / ".edusolver"


@dataclass
class AppConfig:
    """Runtime settings shared by the GUI, the CLI and the session."""

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    model_name: str = DEFAULT_MODEL
    response_language: str = DEFAULT_LANGUAGE
    camera_index: int = 0
    history_limit: int = 50
    max_images: int = 10
    dark_mode: bool = False

    @property
    def storage_path(self) -> Path:
        """SQLite file backing the local key/value store."""
        return self.data_dir / "storage.db"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from. Uses os.environ if None.

        Returns:
            AppConfig with overrides applied
        """
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("EDUSOLVER_DATA_DIR"):
            config.data_dir = Path(env["EDUSOLVER_DATA_DIR"]).expanduser()
        if env.get("EDUSOLVER_MODEL"):
            config.model_name = env["EDUSOLVER_MODEL"]
        if env.get("EDUSOLVER_LANGUAGE"):
            config.response_language = env["EDUSOLVER_LANGUAGE"]
        if env.get("EDUSOLVER_CAMERA"):
            try:
                config.camera_index = int(env["EDUSOLVER_CAMERA"])
            except ValueError:
                raise ValueError(
                    f"EDUSOLVER_CAMERA must be an integer, got {env['EDUSOLVER_CAMERA']!r}"
                )
        if env.get("EDUSOLVER_DARK_MODE"):
            config.dark_mode = env["EDUSOLVER_DARK_MODE"].lower() in ("1", "true", "yes")

        return config
