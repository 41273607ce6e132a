"""
Sage

AI-powered commit message and branch name generation from git changes.
"""

__version__ = "1.0.0"

APP_NAME = "sage"
