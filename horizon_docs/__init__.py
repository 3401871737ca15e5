"""Horizon docs static server.

This package serves the pre-built documentation site (the output of the
site generator) over HTTP. It is intended for containers and simple hosts
where the build directory is already materialized on local disk.

The main entry point is the CLI module, which provides commands for
serving the build directory and for inspecting how a request path resolves.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
