"""Module entrypoint for ``python -m twinpane``."""

from .cli import main


if __name__ == "__main__":
    main()
