"""Configuration loading utility (reuses the package config module)."""

from schedule_advisor.config import AdvisorConfig, load_config

__all__ = ["load_config", "AdvisorConfig"]
