"""Offline-first synchronization for the cycle collection.

Modules:
    monitor     — Remote configuration and connectivity signals
    state       — Owned session state (collection, pending deletions, advisory)
    coordinator — Write-through / fallback logic for load, create, update, delete
    export      — Pretty-printed JSON export of the collection
"""
