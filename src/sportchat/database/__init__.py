"""Key-value storage, record models and repositories."""
