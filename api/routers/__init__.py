"""Auxiliary API routers."""
