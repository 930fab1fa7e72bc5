"""
Configuration Manager Module
============================

Responsibility:
- Centralized loading and validation of JSON configuration files.
- Default hydration for in-memory (library) use.
- Enforcement of schema constraints and logical rules.
- Resource usage guardrails (grid explosion, memory).
- Deterministic seed propagation for reproducibility.
"""

from .config_manager import ConfigurationManager, DEFAULT_CONFIG

__all__ = ['ConfigurationManager', 'DEFAULT_CONFIG']
