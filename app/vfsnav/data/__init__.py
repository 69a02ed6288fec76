"""Bundled data files for vfsnav."""
