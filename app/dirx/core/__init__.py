"""Core configuration, paths, and theming for dirx."""
