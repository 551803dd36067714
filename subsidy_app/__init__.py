"""
Subsidy Financing Engine.

Financing eligibility calculation and cross-validation for
housing-subsidy applications.
"""

__version__ = "1.0.0"
