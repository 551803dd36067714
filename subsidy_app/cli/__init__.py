"""
CLI Module - Command-line interface for the Subsidy Financing Engine.

Provides commands for:
- Evaluating application records
- Tier and variant lookups
"""

from .financing_commands import financing, register_commands

__all__ = ['financing', 'register_commands']
