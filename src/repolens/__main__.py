"""Entry point for running repolens as a module.

Usage:
    python -m repolens [command] [options]

Example:
    python -m repolens analyze octocat hello-world --branch main
    python -m repolens provider use gemini
"""

from repolens.cli import app

if __name__ == "__main__":
    app()
