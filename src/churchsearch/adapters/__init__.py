"""Backend adapter layer — Connectors for the church data backend.

Built-in adapters:
  - postgrest: PostgREST / Supabase remote procedures over HTTP

Implement ``ChurchBackend`` to connect another data store.
"""
