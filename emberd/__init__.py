"""emberd - host surface for ember_library.

Serves built ember apps over HTTP and exposes build commands on the CLI.
"""
