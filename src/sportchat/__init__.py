"""SportChat: conversational workout tracking on a key-value store."""

__version__ = "0.3.0"
