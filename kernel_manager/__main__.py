import sys

from kernel_manager import run

sys.exit(run())
