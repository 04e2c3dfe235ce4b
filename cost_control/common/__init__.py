"""
Process-wide helpers shared by the API layer.
Settings and logging live here so the HTTP layer stays focused on requests.
"""
