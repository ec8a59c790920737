"""records/ -- Read access to submitted CV records.

Layer rule: records/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/.
"""
