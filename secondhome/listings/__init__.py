"""
Listings catalogue.

Responsibilities:
- Load property, mess and booking seed data into in-memory stores.
- Filter and rank approved properties and messes for browsing.
- Derive nearest-place distances and public site statistics.
- Memoize slow third-party lookups in a TTL cache.
"""
