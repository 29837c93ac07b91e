"""
Destination directory pipeline.

Scrapes partner-institution pages into sectioned, geocoded destination lists
and caches them per (field, lang).
"""
