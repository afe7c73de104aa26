#!/usr/bin/env python3
"""
OpenAI Assistant Cloner

Copies assistants (instructions, model settings, tools and optionally their
files and vector stores) from one OpenAI organization/project to another.

- plan:   show what would be cloned
- apply:  clone
- export: dump source assistants to JSON
- import: load such a dump into the destination

This script supports running directly from a source checkout that uses a
src/ layout: it adds the local `src/` directory to sys.path. For production
use, prefer installing the project and using the `assistant-cloner` console
script.
"""

import os
import sys

# Add src/ to path to import modules directly
REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from cli import main

if __name__ == "__main__":
    sys.exit(main())
