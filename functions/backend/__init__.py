"""
Backend package for the destinations API.

This package provides a FastAPI application with database abstractions and a
background refresh worker around the destination scraping pipeline.
"""
