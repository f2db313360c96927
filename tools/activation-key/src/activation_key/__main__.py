"""
Top-level entry point: python -m activation_key <command>
"""

from .cli import main

if __name__ == "__main__":
    main()
