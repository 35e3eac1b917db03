"""Breadth-style web crawler with resumable on-disk page records."""
