"""Hairstyle Tasks - orchestration engine для AI генерации причёсок."""

__version__ = "1.0.0"
