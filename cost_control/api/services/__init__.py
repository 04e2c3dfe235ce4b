# This file marks the services package for API business logic modules.
# Services run parameterized SQL through the database client and return plain dictionaries.
