"""Shared builders for unit and behavioural tests."""
