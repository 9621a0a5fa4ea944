"""Configuration, HTTP downloads, checksums and command-line parsing for managing Ventoy ISO images."""

__version__ = "0.1.0"