"""Settings for correlation vector construction.

Strict validation, the default version and the spin configuration are read
from ``CV_*`` environment variables (or a ``.env`` file) into one validated
object. Nothing in the library reads them implicitly: a
:class:`~cvector.factory.CorrelationVectorFactory` is built from a settings
instance and applies it to every construction, so two factories with different
settings never interfere.

Examples:
    >>> settings = CorrelationVectorSettings(validate_during_creation=True)
    >>> settings.spin_parameters().total_bits
    32

    Environment::

        CV_VALIDATE_DURING_CREATION=true
        CV_DEFAULT_VERSION=2
        CV_SPIN_INTERVAL=coarse
        CV_SPIN_ENTROPY=four

Tags:
    settings, configuration, pydantic, environment, correlation-vector

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cvector.format import Version
from cvector.spin import SpinCounterInterval, SpinCounterPeriodicity, SpinEntropy, SpinParameters


class CorrelationVectorSettings(BaseSettings):
    """Configuration applied by a factory to every vector it builds.

    Fields
    ──────
    validate_during_creation : Run the strict grammar check on incoming strings
    default_version          : Version of freshly created vectors
    spin_interval            : Spin resolution (COARSE / MEDIUM / FINE)
    spin_periodicity         : Spin tick bits retained (NONE / SHORT / MEDIUM / LONG)
    spin_entropy             : Spin random bytes (NONE .. FOUR)
    log_level                : Structlog log level for configure_logging
    """

    model_config = SettingsConfigDict(
        env_prefix="CV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ── Construction ─────────────────────────────────────────────
    validate_during_creation: bool = False
    default_version: Version = Version.V1

    # ── Spin ─────────────────────────────────────────────────────
    spin_interval: SpinCounterInterval = SpinCounterInterval.FINE
    spin_periodicity: SpinCounterPeriodicity = SpinCounterPeriodicity.SHORT
    spin_entropy: SpinEntropy = SpinEntropy.TWO

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"

    @field_validator("default_version", mode="before")
    @classmethod
    def _version_by_name(cls, value: Any) -> Any:
        return _enum_by_name(Version, value)

    @field_validator("spin_interval", mode="before")
    @classmethod
    def _interval_by_name(cls, value: Any) -> Any:
        return _enum_by_name(SpinCounterInterval, value)

    @field_validator("spin_periodicity", mode="before")
    @classmethod
    def _periodicity_by_name(cls, value: Any) -> Any:
        return _enum_by_name(SpinCounterPeriodicity, value)

    @field_validator("spin_entropy", mode="before")
    @classmethod
    def _entropy_by_name(cls, value: Any) -> Any:
        return _enum_by_name(SpinEntropy, value)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    def spin_parameters(self) -> SpinParameters:
        return SpinParameters(self.spin_interval, self.spin_periodicity, self.spin_entropy)


def _enum_by_name(enum_cls: type[IntEnum], value: Any) -> Any:
    """Accept enum member names ("fine", "V2") as well as values."""
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        member = enum_cls.__members__.get(text.upper())
        if member is not None:
            return member
    return value


_settings_cache: dict[str, CorrelationVectorSettings] = {}


def get_settings(*, reload: bool = False) -> CorrelationVectorSettings:
    """Load and cache settings from the environment.

    Args:
        reload: Bypass the cache and read the environment again.
    """
    if reload or "default" not in _settings_cache:
        _settings_cache["default"] = CorrelationVectorSettings()
    return _settings_cache["default"]


__all__ = ["CorrelationVectorSettings", "get_settings"]
