"""Marketing-analytics backend: ad-platform CSV ingestion and ROAS reporting."""
