"""Module entrypoint for ``python -m textpane``.

All argument parsing and runtime setup happen in ``textpane.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
