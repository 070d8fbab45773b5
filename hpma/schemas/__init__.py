"""Pydantic schemas for questions, profiles, rosters and reports."""
