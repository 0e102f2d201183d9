"""
SQLAlchemy ORM models for the run engine.

Pure database models using SQLAlchemy 2.0 declarative style.
For domain models, see apprunner.models.contracts.
"""

from apprunner.models.orm.apps import App
from apprunner.models.orm.base import Base
from apprunner.models.orm.dashboards import Dashboard
from apprunner.models.orm.resources import Resource
from apprunner.models.orm.runs import Run

__all__ = [
    "Base",
    "App",
    "Dashboard",
    "Resource",
    "Run",
]
