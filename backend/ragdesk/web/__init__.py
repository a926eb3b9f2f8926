"""HTTP surface and relational records."""
