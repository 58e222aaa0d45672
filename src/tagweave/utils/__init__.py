"""Shared utilities for tagweave."""
