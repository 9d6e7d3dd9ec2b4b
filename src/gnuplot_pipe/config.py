"""
Configuration management using Pydantic settings.

All configuration values are loaded from environment variables (prefixed with
GNUPLOT_) or a .env file. Values left unset fall back to the defaults of the
detected platform.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.platform import PlatformProfile, detect_platform


class Settings(BaseSettings):
    """Package settings loaded from environment variables."""

    # Plotter location
    plotter_path: Optional[str] = None
    plotter_filename: Optional[str] = None
    terminal: Optional[str] = None
    require_display: bool = True

    # Temporary data files
    max_tmp_files: Optional[int] = None
    tmp_dir: Optional[str] = None
    keep_tmpfiles: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    model_config = SettingsConfigDict(
        env_prefix="GNUPLOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def platform(self) -> PlatformProfile:
        """Profile of the running platform."""
        return detect_platform()

    def resolved_max_tmp_files(self) -> int:
        return self.max_tmp_files if self.max_tmp_files is not None else self.platform.max_tmp_files

    def resolved_tmp_dir(self) -> str:
        return self.tmp_dir if self.tmp_dir is not None else self.platform.tmp_dir


class PlotterConfig(BaseModel):
    """
    Mutable plotter location shared by the sessions that use it.

    Attributes:
        path: Directory holding the gnuplot executable
        filename: Executable name
        terminal: Terminal used when switching output back to the screen
        profile: Platform capabilities used for probing
    """

    path: str = Field(description="Configured plotter directory")
    filename: str = Field(description="Plotter executable name")
    terminal: str = Field(description="Default screen terminal")
    profile: PlatformProfile = Field(default_factory=detect_platform)

    model_config = ConfigDict(validate_assignment=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlotterConfig":
        """
        Build a config from settings, filling gaps with platform defaults.

        Args:
            settings: Loaded settings

        Returns:
            New PlotterConfig instance
        """
        profile = settings.platform
        return cls(
            path=settings.plotter_path if settings.plotter_path is not None else profile.plotter_path,
            filename=settings.plotter_filename or profile.plotter_filename,
            terminal=settings.terminal or profile.terminal,
            profile=profile,
        )

    @property
    def executable(self) -> str:
        """Full path of the plotter executable."""
        return f"{self.path}/{self.filename}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Singleton Settings instance loaded from environment.

    Note:
        Uses lru_cache to ensure settings are loaded only once.
        To reload settings (e.g., in tests), call get_settings.cache_clear()
    """
    return Settings()


@lru_cache
def get_plotter_config() -> PlotterConfig:
    """
    Get the process-wide plotter config.

    Note:
        Sessions created without an explicit config share this instance, so
        set_plotter_path() and set_terminal_std() affect all of them.
        Call get_plotter_config.cache_clear() to rebuild it from settings.
    """
    return PlotterConfig.from_settings(get_settings())
