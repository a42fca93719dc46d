#!/usr/bin/env python
"""Install pip into the interpreter running this script.

Run by pip-frontend with the target interpreter. Uses ensurepip unless a
downloaded get-pip.py is given with --get-pip. Only the standard library
is available here, and the target may be an old interpreter.
"""

import argparse
import os
import runpy
import sys

EXIT_NO_ENSUREPIP = 3


def run_get_pip(script_path, extra_args):
    print("Running %s" % script_path)
    sys.argv = [script_path] + list(extra_args)
    try:
        runpy.run_path(script_path, run_name="__main__")
    except SystemExit as e:
        code = e.code
        if code is None:
            return 0
        if isinstance(code, int):
            return code
        print(code)
        return 1
    return 0


def run_ensurepip(upgrade):
    try:
        import ensurepip
    except ImportError:
        print("ensurepip is not available in this interpreter.")
        print("Set bootstrap_url in the pip-frontend preferences to use get-pip.py.")
        return EXIT_NO_ENSUREPIP

    print("Installing pip with ensurepip")
    ensurepip.bootstrap(upgrade=upgrade, default_pip=True)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Install pip")
    parser.add_argument("--get-pip", dest="get_pip", help="Path to a downloaded get-pip.py")
    parser.add_argument("--no-upgrade", dest="upgrade", action="store_false")
    args, extra = parser.parse_known_args(argv)

    if args.get_pip:
        if not os.path.isfile(args.get_pip):
            print("Bootstrap script not found: %s" % args.get_pip)
            return 2
        return run_get_pip(args.get_pip, extra)

    return run_ensurepip(args.upgrade)


if __name__ == "__main__":
    sys.exit(main())
