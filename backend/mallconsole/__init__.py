"""Super Mall administrative console."""
