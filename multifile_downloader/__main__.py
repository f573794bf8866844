"""
Main entry point for the multifile_downloader package.

Allows running the downloader as: python -m multifile_downloader
"""

import sys

from multifile_downloader.cli import main

if __name__ == "__main__":
    sys.exit(main())
