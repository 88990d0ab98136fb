"""Scan job lifecycle: stages, progress and the orchestrator."""
