"""Main entry point for dumpkit"""

from cli import cli


def main():
    return cli()


if __name__ == "__main__":
    main()
