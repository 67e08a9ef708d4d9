"""Game domain services: text normalization, validation, scoring and views.

Pure logic imported by the session, the HTTP routes and the socket
handlers, keeping transport concerns separated from game mechanics.
"""
