#!/usr/bin/env python3
"""
AAC image generation pipeline - entry script

Usage:
    # Process a prompt file
    python generate_aac_images.py scripts/aac-prompts.json

    # Show usage and the input format
    python generate_aac_images.py
"""

import sys

from aac_image_pipeline.cli import main

if __name__ == "__main__":
    sys.exit(main())
