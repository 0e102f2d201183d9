"""
AppRunner

Turns declared apps (templated HTTP requests or SQL queries over a shared
resource) plus submitted input values into executed, auditable runs.
"""

__version__ = "0.1.0"
