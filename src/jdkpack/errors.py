"""Base exception for jdkpack.

Each component defines its own error type next to the code that raises it;
all of them derive from JdkPackError so the CLI can report any pipeline
failure uniformly.
"""


class JdkPackError(Exception):
    """Base exception for all build and packaging failures."""

    pass
