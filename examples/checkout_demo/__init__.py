"""Multi-vendor checkout against an in-memory sqlite database."""
