"""
Module entry point for: python -m blastparse

Allows running the parser directly as a module:
    python -m blastparse parse --file <report> [options]
    python -m blastparse batch <directory> [options]
    python -m blastparse validate <json_path>
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
