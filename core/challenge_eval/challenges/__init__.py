"""Bundled challenge catalogue (YAML). Read through ``_challenge_loader``."""
