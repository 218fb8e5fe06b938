"""Game domain services.

Pure game mechanics imported by HTTP routes, kept apart from transport
concerns so they can be driven directly from tests.
"""
