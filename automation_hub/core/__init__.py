"""
Core dispatcher logic: readiness rules, request building, single-flight
execution and the auto-detect toggle.

Submodules are imported directly (``automation_hub.core.orchestrator``) so
that adapters can depend on ``core.errors`` without loading the orchestrator.
"""
