"""Adaptadores de I/O: HTTP (Salesforce), filesystem (sitio, JSON)."""
