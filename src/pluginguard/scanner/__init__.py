"""Static scanning: corpus walking, matching and the scan engine."""
