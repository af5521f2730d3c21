"""Persistence adapters: Supabase remote store and on-device cache."""
