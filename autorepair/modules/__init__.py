"""Autorepair modules package."""
