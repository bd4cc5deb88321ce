"""Module entrypoint for ``python -m eslsync``."""

from eslsync.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
