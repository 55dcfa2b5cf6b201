"""SIGIL Registry — telemetry (structured logging)."""
