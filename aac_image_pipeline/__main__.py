"""
Allows running with python -m aac_image_pipeline
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
