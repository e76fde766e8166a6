"""Shared helpers for dates, logging, auth and pagination."""
