"""Review checklist commands."""
