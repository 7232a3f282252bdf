"""Shared utilities used across the review platform."""
