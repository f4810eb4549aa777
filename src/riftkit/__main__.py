"""Entry point for ``python -m riftkit``."""

from riftkit.cli import main

if __name__ == "__main__":
    main(prog_name="riftkit")
