#!/usr/bin/env python3
"""
Convenience launcher for an installed activation-key package.

    pip install -e .
    python tools/activation-key/activation-key.py decode --example
"""

from activation_key.cli import main

if __name__ == "__main__":
    main()
