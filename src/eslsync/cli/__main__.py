"""Module entrypoint for ``python -m eslsync.cli``."""

from eslsync.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
