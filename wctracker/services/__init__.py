"""Service helpers backing the wc-tracker CLI and API."""
