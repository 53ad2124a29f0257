"""Utility helpers for the ELC client."""
