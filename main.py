from rich.pretty import pprint

from arglet import *

parser = ArgParser("prog")
parser.add_int_argument("-n", "--number", descr="how many times").default(0)
parser.add_flag("-v", "--verbose", descr="talk more")
parser.add_string_argument("--name", descr="who to greet")
parser.add_help("-h", "--help", descr="show this help")


if __name__ == '__main__':
    pprint(parser.try_parse())
    if parser.help():
        parser.print_help()
    else:
        pprint(parser.registry.cell(parser.registry.resolve("number")))
