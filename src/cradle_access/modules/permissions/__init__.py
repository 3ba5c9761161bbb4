"""Administration of the permission catalog and roles."""
