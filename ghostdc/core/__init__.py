"""
Core ghostdc functionality.

Exports core abstractions and base classes.
"""

from ghostdc.core.resource import Resource, Plan, Action, Change, Platform

__all__ = ["Resource", "Plan", "Action", "Change", "Platform"]
