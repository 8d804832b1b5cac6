"""HTTP boundary between the UI and the analysis core."""
