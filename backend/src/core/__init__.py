"""
Core package for shared utilities.

Holds application settings and the structured logging setup used by every
other package in the order service.
"""
