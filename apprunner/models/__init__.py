"""
Run Engine Models

ORM models (database tables):
    from apprunner.models import App, Resource, Run, Dashboard
    from apprunner.models.orm.runs import Run  # Granular access

Pydantic contracts (domain records and command payloads):
    from apprunner.models import AppDefinition, RunRecord
    from apprunner.models.contracts.inputs import Input  # Granular access

Enums:
    from apprunner.models.enums import RunStatus
"""

# ORM models (database tables)
from apprunner.models.orm import (
    App,
    Base,
    Dashboard,
    Resource,
    Run,
)

# Pydantic contracts
from apprunner.models.contracts import *  # noqa: F401, F403
