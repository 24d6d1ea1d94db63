"""Bundled runner resources (bootstrap helpers, default runner configuration)."""
