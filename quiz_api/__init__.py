"""Quiz session service for the employee training portal."""
