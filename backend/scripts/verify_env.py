#!/usr/bin/env python3
"""Verify environment variables before deploying."""

import sys

sys.path.insert(0, str(__file__).rsplit("/", 2)[0])

from vcnotebook.core.env_check import main

if __name__ == "__main__":
    sys.exit(main())
