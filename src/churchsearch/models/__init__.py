"""Data models — queries, church records, and response shapes."""
