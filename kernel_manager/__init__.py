import sys


def run() -> int:
    """Console entry point.

    archinstall parses sys.argv when it is first imported, so the command line
    is taken away from it before anything imports archinstall.
    """
    argv = sys.argv[1:]
    sys.argv = sys.argv[:1]

    from kernel_manager.main import main

    return main(argv)
