"""SIGIL Registry — HTTP surface."""
