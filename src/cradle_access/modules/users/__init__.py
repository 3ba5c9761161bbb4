"""User accounts and their role and permission grants."""
