"""Allow running narfetch with ``python -m narfetch``."""

from narfetch.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
