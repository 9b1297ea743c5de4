"""Allow running rufio as ``python -m rufio``."""
from rufio.cli import main

if __name__ == "__main__":
    main()
