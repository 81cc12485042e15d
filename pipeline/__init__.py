"""Candidate workflow engine and its integrations."""
