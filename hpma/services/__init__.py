"""Scoring, classification and report services."""
