"""Enable `python -m i3mscene` entry point."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
