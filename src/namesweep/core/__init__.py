"""Core primitives: errors, logging, settings, run configuration, line I/O."""
