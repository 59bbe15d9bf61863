"""Shared helpers for the ForgeCraft test suite."""
