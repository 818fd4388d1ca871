"""Orchestration core: errors, resilience, provider adapters and flows."""
