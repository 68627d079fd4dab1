"""Entry point for running autolabel as a module.

Allows running the application with:
    python -m autolabel

This delegates to the Typer CLI app.
"""

from autolabel.cli import app

if __name__ == "__main__":
    app()
