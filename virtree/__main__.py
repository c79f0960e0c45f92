"""Allow ``python -m virtree < input.txt``."""

import sys

from virtree._cli import main


if __name__ == "__main__":
    sys.exit(main())
