"""Command line interface for skiaboot."""
