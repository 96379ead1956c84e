"""HTTP API routes, schemas, and dependency factories."""
