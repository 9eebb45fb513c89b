try:
    from mcspy.cli.app import cli
except ModuleNotFoundError:
    # Fallback: ensure project root is on sys.path when run from a checkout
    import os
    import sys

    sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
    from mcspy.cli.app import cli


def main():
    """Entry point for the mcspy CLI. Delegates to mcspy.cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
