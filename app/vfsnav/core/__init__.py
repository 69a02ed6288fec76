"""Core configuration, paths and theming for vfsnav."""
