"""Shared utilities for ForgeCraft core modules."""
