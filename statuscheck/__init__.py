"""
Cloud Status Checker: "is the platform up?" as a single cached signal.

Fetches a public health feed of unreliable encoding, decodes and parses
it defensively, and serves a yes / no / unknown verdict to consumers.
"""

__version__ = "1.0.0"
