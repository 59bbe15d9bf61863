"""Fragment catalog commands."""
