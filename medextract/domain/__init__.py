"""Shared stage contracts and vocabulary."""
