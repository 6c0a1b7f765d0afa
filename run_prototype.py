#!/usr/bin/env python3
"""
Startup script for the narrative world engine.

To run:
    python run_prototype.py [options]

Example usage:
    python run_prototype.py --debug
    python run_prototype.py --world my_world.json --model gpt-4o
    python run_prototype.py --tools move_object,move_player,find_entity_location

Run this from the project root directory.
"""

import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from runtime.main import main

if __name__ == "__main__":
    main()
