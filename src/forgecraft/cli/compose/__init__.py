"""Composition commands."""
