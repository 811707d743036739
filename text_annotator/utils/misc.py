from pathlib import Path


def read_version() -> str:
    return (Path(__file__).parent.parent / "VERSION").read_text().strip()


def incrf(start: int = 1):
    """Infinite counter, used to number listing entries."""
    i = start
    while True:
        yield i
        i += 1
