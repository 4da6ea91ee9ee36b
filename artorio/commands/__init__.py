"""CLI commands. Each module defines a `command` found by artorio.registry.discover()."""
