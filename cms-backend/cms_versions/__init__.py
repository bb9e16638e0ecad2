"""CMS page version history service."""
