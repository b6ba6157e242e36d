"""Entry point for 'python -m lunarconsole' command.

This module allows the console CLI to be invoked using
'python -m lunarconsole'.
"""

from lunarconsole.cli import main

if __name__ == "__main__":
    main()
