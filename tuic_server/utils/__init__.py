"""Shared utilities: exceptions, logging and version lookup."""
