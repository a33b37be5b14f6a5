"""User service backend.

A FastAPI façade over a Supabase project: account sign-up (Auth identity
plus ``users`` row) and read/update of user records through PostgREST.
"""
