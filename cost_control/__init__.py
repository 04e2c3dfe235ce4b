"""
Cost control API package.
Groups the HTTP layer (`cost_control.api`) and process-wide helpers (`cost_control.common`).
"""
