# devenv/__main__.py
# -*- coding: utf-8 -*-
"""Allows `python -m devenv`."""

from devenv.cli import cli

if __name__ == "__main__":
    cli(prog_name="flowdesk")
