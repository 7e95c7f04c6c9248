"""Offline evaluation of the classification pipeline."""
