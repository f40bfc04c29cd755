"""App package initializer for the Earth Engine catalog backend service.

This package contains the backend a map client uses to discover Earth Engine
datasets and to delegate rendering and analysis to a user-configured HTTP
endpoint.

- Loads the official and community dataset catalogs concurrently, tolerating
  bare NaN literals, and normalizes both into one record shape
- Filters, sorts, pages and groups catalog records for the dataset browser
- Normalizes endpoint URLs, shapes endpoint requests and parses tile responses
- Tracks the capabilities an endpoint advertises and refuses unsupported
  analysis calls locally

See README and module sub-docstrings for details on architecture and usage.
"""
