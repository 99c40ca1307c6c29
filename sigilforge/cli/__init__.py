"""Sigilforge CLI — Typer-based command-line interface.

Provides the ``sigilforge`` command with subcommands for evaluating a
literal, scanning a text for literals, and listing registered sigils.

All output uses Rich for formatted terminal display.
"""
