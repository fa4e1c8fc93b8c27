"""Core tracker logic: timeline filtering/sorting and comment threading."""
