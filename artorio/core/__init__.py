"""artorio.core — Conversion pipeline.

Contains rule matching, the pixel scanner, grid assembly and the blueprint
codec. This module has NO dependencies on artorio.commands or artorio.registry.
Only stdlib, numpy, and PIL are allowed here.
"""
