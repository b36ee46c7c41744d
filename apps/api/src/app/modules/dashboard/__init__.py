"""Dashboard module - role-based navigation."""
