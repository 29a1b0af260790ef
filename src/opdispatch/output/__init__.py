"""Output formatting — Rich console renderers and JSON output."""
