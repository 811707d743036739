import sys

from text_annotator.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
