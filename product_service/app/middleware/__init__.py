"""Middleware for Product Service."""
