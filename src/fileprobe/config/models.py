"""Configuration models describing fileprobe settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileprobeBaseModel(BaseModel):
    """Shared configuration for fileprobe settings models."""

    model_config = ConfigDict(extra="forbid")


class ScanSettings(FileprobeBaseModel):
    """Directory scanning defaults.

    Attributes:
        recursive: Whether scans descend into subdirectories.
        follow_symlinks: Whether symbolic links to directories are entered.
        include_hidden: Whether dot-prefixed entries are reported.
        max_depth: Optional limit on subdirectory levels entered.
    """

    recursive: bool = False
    follow_symlinks: bool = True
    include_hidden: bool = True
    max_depth: Optional[int] = Field(default=None, ge=0)


class ClassificationSettings(FileprobeBaseModel):
    """File type classification options.

    Attributes:
        sample_size: Leading bytes read for signature matching (12 to 32).
        app_archive_extensions: Extensions that turn a ZIP into an app archive.
    """

    sample_size: int = Field(default=32, ge=12, le=32)
    app_archive_extensions: List[str] = Field(default_factory=lambda: ["ipa"])

    @field_validator("app_archive_extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        return [ext.lower().lstrip(".") for ext in value if ext.strip(". ")]


class DigestSettings(FileprobeBaseModel):
    """Hashing options.

    Attributes:
        chunk_size: Bytes read per chunk while hashing and comparing.
        max_workers: Upper bound on threads used to hash several files.
    """

    chunk_size: int = Field(default=8192, gt=0)
    max_workers: int = Field(default=1, ge=1)


class LoggingSettings(FileprobeBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables a rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(FileprobeBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class FileprobeConfig(FileprobeBaseModel):
    """Top-level configuration for fileprobe."""

    scanning: ScanSettings = Field(default_factory=ScanSettings)
    classification: ClassificationSettings = Field(default_factory=ClassificationSettings)
    digest: DigestSettings = Field(default_factory=DigestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "FileprobeBaseModel",
    "ScanSettings",
    "ClassificationSettings",
    "DigestSettings",
    "LoggingSettings",
    "CLIOptions",
    "FileprobeConfig",
]
