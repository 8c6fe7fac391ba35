"""API routers package.

Each router module owns one resource and delegates to ``vds.ops``.
"""
