"""Module entrypoint for `python -m rosella`."""

try:
    from .cli import run
except ImportError:
    from rosella.cli import run

if __name__ == "__main__":
    raise SystemExit(run())
