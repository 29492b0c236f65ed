"""User management API with external profile validation."""
