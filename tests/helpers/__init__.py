"""
Test helpers for the run engine

Provides reusable helpers for:
- In-memory repositories and stub executors (fakes.py)
- Test data factories (factories.py)
"""
