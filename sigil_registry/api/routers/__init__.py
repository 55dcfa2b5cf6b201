"""SIGIL Registry — API routers."""
