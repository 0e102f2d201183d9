# Data access layer - PostgreSQL repositories
from apprunner.repositories.apps import AppRepository
from apprunner.repositories.base import BaseRepository
from apprunner.repositories.dashboards import DashboardRepository
from apprunner.repositories.resources import ResourceRepository
from apprunner.repositories.runs import RunRepository

__all__ = [
    "AppRepository",
    "BaseRepository",
    "DashboardRepository",
    "ResourceRepository",
    "RunRepository",
]
