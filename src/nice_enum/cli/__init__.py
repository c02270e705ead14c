"""
nice-enum Command-Line Interface
================================

This package provides the command-line tool for nice-enum:

- **nicegen**: reads Rust source (or a JSON schema) and writes the kind
  types and accessor impls derived for its enums

The tool is a Click application; error reporting and exit codes are
shared through cli.errors.
"""

__all__ = ["nicegen"]
