"""Allow ``python -m worklog``."""

from worklog.cli.main import app

if __name__ == "__main__":
    app()
