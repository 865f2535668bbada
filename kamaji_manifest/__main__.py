"""Run the kamaji-manifest command line tool."""

from kamaji_manifest.tool.kamaji_manifest import main

if __name__ == "__main__":
    main()
