"""Utility script to log in to the telematics API and print the access token."""

import sys

from integrations.telematics.cli import main

if __name__ == "__main__":
    sys.exit(main())
