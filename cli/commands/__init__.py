"""Command groups registered with the txgate CLI."""
