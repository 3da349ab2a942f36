"""
Tasklist - private task lists with revocable session tokens.
"""

__version__ = "0.1.0"
