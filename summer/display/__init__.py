"""Grid layout and terminal rendering of an analysis."""
