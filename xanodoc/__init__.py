"""Turn low-code platform exports into browsable repositories and OpenAPI 3.1 docs."""
