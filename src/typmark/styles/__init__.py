"""Bundled default stylesheets injected into rendered SVGs."""
