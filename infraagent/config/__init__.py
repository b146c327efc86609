"""Configuration for infraagent."""

from infraagent.config.settings import InfraAgentSettings, KdfSettings

__all__ = ["InfraAgentSettings", "KdfSettings"]
