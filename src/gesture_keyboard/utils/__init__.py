"""Configuration, logging, feedback and overlay helpers."""
