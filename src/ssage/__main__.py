"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.
"""

import sys

from .cli import main

sys.exit(main())
