"""Entry point for running tdb from a source checkout."""
import sys
from pathlib import Path

# Ensure the checkout root is in path
root = Path(__file__).parent.resolve()
sys.path.insert(0, str(root))

from tdb.cli.main import main

if __name__ == "__main__":
    main()
