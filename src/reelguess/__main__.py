"""Allow running as ``python -m reelguess``."""

from reelguess.cli import main

if __name__ == "__main__":
    main()
