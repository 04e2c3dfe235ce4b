# This package holds the FastAPI application for the cost control backend.
# Routers, services, schemas, and request plumbing are split into sibling modules.
