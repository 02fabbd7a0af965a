"""Release update feeds filtered per customer."""
