"""Daily reports from coding assistant session logs."""
