"""Inspect, back up, restore and repair vector database metadata held in a key-value store."""

__version__ = "0.1.0"