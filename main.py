import sys

from rich.pretty import pprint

from pickargs import Arguments
from pickargs.utils import Unset

__prog__ = "app"

HELP = """\
App

USAGE:
  app [OPTIONS] --number NUMBER INPUT [EXTRA...]

FLAGS:
  -h, --help            Prints help information

OPTIONS:
  --number NUMBER       Sets a number
  --opt-number NUMBER   Sets an optional number
  --width WIDTH         Sets width [default: 10]

ARGS:
  <INPUT>
  <EXTRA>...            Extra positional arguments
"""


def parse_width(text):
    value = int(text)
    if value <= 0:
        raise ValueError("width must be positive")
    return value


def parse(prompt=Unset, /, **options):
    args = Arguments(prompt, **options)

    if args.contains(("-h", "--help")):
        return None

    number = args.value("--number", int)
    opt_number = args.opt_value("--opt-number", int)
    width = args.opt_value("--width", parse_width)

    return {
        "number": number,
        "opt_number": opt_number,
        "width": 10 if width is None else width,
        "input": args.free_value(),
        "rest": args.free(),
    }


if __name__ == '__main__':
    if (parsed := parse(shell=True, colorful=True)) is None:
        print(HELP, end="")
        sys.exit(0)
    pprint(parsed)
