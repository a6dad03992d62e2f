"""auth/ -- Authentication and authorization package for TodoVault.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or todos/.
api/ and todos/ import from auth/, not the other way around.
"""
