"""HTTP API for the sportchat backend."""
