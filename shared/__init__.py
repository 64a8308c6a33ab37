"""Shared helpers used across the Tournament Manager packages.

Holds the exception taxonomy (`shared.errors`) and the rotating log setup used by
the watcher runtime (`shared.logging_utils`).
"""
