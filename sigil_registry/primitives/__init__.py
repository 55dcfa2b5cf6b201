"""SIGIL Registry — shared primitives."""
