"""CLI subcommands for regkeeper."""
