"""Configuration, logging, and prompt strings shared across aiclient."""
