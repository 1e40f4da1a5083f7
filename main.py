"""camo-metadata — Entry point.

    python main.py check notes.camo
    python main.py compile notes.camo --json
"""
from camo.cli import app


def main() -> None:
    app(prog_name="camo")


if __name__ == "__main__":
    main()
