"""HTTP API for submitting scans and polling their progress."""
