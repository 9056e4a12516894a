"""Command-line entrypoints for the aiclient facade."""

def main(argv=None) -> int:
    """Lazy CLI dispatcher to avoid import side effects.

    Returns:
        int: Process return code.
    """
    from .entrypoints import main as _main

    return _main(argv)

__all__ = ["main"]
