"""Module entrypoint for ``python -m summer``.

Argument parsing and output happen in ``summer.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
