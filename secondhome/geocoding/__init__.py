"""
Geocoding for listing addresses.

Responsibilities:
- Forward geocode free-form Indian addresses, widening the query with
  city / state / PIN context until a provider answers.
- Reverse geocode map picks into address components.
- Prefer Google when keyed; otherwise Nominatim with Photon as fallback.
"""
