"""CSV splitter service package."""
