"""Run wsshell from a source checkout without installing it."""

import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from cli.main import run_cli


if __name__ == '__main__':
    run_cli()
