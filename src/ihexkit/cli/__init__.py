"""
ihexkit Command-Line Interface
==============================

This package provides the ihextool command:

- **ihextool list**: List the records of an Intel HEX file
- **ihextool info**: Summarize an Intel HEX file
- **ihextool validate**: Check an Intel HEX file for errors
- **ihextool bin**: Convert an Intel HEX file to a binary image

The tool is a Click-based CLI application with consistent exit codes
(see cli.errors).
"""

__all__ = ["ihextool"]
