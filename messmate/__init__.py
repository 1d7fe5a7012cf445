"""MessMate: shared-meal expense tracking and monthly settlement for messes."""

__version__ = "0.1.0"
