"""Configuration management for ffsites.

Settings come from defaults, an optional TOML file, and command-line
flags (which win). A configuration file looks like:

    [extract]
    chrom_prefix = "chr"
    arms = ["2L", "2R", "3L", "3R", "4", "X"]

    [logging]
    verbosity = 2
    log_file = "extract.log"

Example:
    >>> from ffsites.config import Config
    >>> config = Config.load("ffsites.toml")
    >>> config.extract.chrom_prefix
    'chr'
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import attrs
import tomli_w

from ffsites.io.headers import CHROMOSOME_ARMS
from ffsites.io.sites import DEFAULT_CHROM_PREFIX, DEFAULT_HEADER

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_VERBOSITY = 1
DEFAULT_ARMS = tuple(sorted(CHROMOSOME_ARMS))


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ExtractConfig:
    """Configuration for site extraction and output.

    Attributes:
        chrom_prefix: Prefix added to chromosome names in the output table.
        header: Output table column names.
        arms: Recognized chromosome arm names.
    """

    chrom_prefix: str = DEFAULT_CHROM_PREFIX
    header: list[str] = attrs.field(factory=lambda: list(DEFAULT_HEADER))
    arms: list[str] = attrs.field(factory=lambda: list(DEFAULT_ARMS))

    @header.validator
    def _check_header(self, attribute: attrs.Attribute, value: list[str]) -> None:
        if len(value) != 3:
            raise ValueError(f"Output header needs 3 columns, got {len(value)}")

    @arms.validator
    def _check_arms(self, attribute: attrs.Attribute, value: list[str]) -> None:
        if not value:
            raise ValueError("At least one chromosome arm is required")

    @property
    def arm_set(self) -> frozenset[str]:
        return frozenset(self.arms)


@attrs.define
class LoggingConfig:
    """Configuration for diagnostics.

    Attributes:
        verbosity: Console verbosity (0=warning, 1=info, 2=debug).
        log_file: Diagnostic log file, or None for console only.
    """

    verbosity: int = DEFAULT_VERBOSITY
    log_file: str | None = None


@attrs.define
class Config:
    """Main configuration container for ffsites.

    Attributes:
        extract: Extraction and output configuration.
        logging: Logging configuration.
    """

    extract: ExtractConfig = attrs.Factory(ExtractConfig)
    logging: LoggingConfig = attrs.Factory(LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from nested dictionaries.

        Raises:
            ValueError: If a section or key is unknown or a value is invalid.
        """
        sections = {"extract": ExtractConfig, "logging": LoggingConfig}
        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            fields = {a.name for a in attrs.fields(section_cls)}
            bad = set(values) - fields
            if bad:
                raise ValueError(f"Unknown keys in [{name}]: {sorted(bad)}")
            kwargs[name] = section_cls(**values)
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns default
                configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return attrs.asdict(self)

    def save(self, path: Path | str) -> None:
        """Save configuration to a TOML file.

        Unset values (None) are omitted.
        """
        data = {
            section: {key: value for key, value in values.items() if value is not None}
            for section, values in self.to_dict().items()
        }
        with open(path, "wb") as f:
            tomli_w.dump(data, f)
