"""Threat and opportunity annotations for skill-check roll messages."""
