"""
Shared Components

Exceptions and result types used across all layers.
"""
