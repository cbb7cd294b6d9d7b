"""Realtime infrastructure (Socket.IO).

This package holds the project-scoped notification fan-out: the group
registry, the Socket.IO server and its remote procedures, the per-mutation
publishers and the client-side subscription layer.
"""
