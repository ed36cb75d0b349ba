"""Production adapters for the trust pipeline ports."""
