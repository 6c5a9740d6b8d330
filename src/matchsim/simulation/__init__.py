"""Headless match sessions and automated bettors."""
