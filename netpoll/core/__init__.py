"""Collector core: models, roster, scheduling and reporting."""
