"""Shared logging and metrics utilities."""
