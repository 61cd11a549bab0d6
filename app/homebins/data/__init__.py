"""Bundled data files for homebins."""
