# ABOUTME: Entry point for running Bref CLI as a module
# ABOUTME: Delegates to the cleo application in bref_cli.cli

from bref_cli.cli import main

if __name__ == "__main__":
    main()
