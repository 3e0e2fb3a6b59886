"""In-memory commerce API used by the storefront client during development and tests."""
