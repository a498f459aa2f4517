"""Pydantic schemas shared by the API and integrations."""
