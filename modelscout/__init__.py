"""
modelscout - model catalog acquisition and normalization.

Fetches the list of available models from an OpenRouter-compatible catalog
API, survives its instability, and returns a validated, classified and
deterministically ordered catalog.
"""

__version__ = "1.0.0"
