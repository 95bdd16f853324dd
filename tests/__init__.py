"""
Trade Setup Engine Test Suite

This package contains all tests for the trade setup engine, organized by category:
- unit: Unit tests for individual components
- integration: Integration tests for the composed pipeline
"""

__version__ = "1.0.0"
