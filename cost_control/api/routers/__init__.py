# This file marks the routers package for API route modules.
# Each module owns one resource and declares its field rule sets next to the routes.
