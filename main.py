"""Main entry point for the quizcore CLI."""

from quizcore.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()
