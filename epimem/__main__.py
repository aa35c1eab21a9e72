"""Allow `python -m epimem`."""

from epimem.cli import run

if __name__ == "__main__":
    run()
