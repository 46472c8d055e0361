from rich.pretty import pprint

from argspan import *

parser = Parser()
parser.add(Kind.TEXT, "name", "n", "who to greet")
parser.add(int, "age", help="age in years")
parser.add(bool, "verbose", "v", "print the parsed declarations")
parser.add(Kind.TEXT_LIST, "tags", "t", "free-form labels", optional=True)


if __name__ == '__main__':
    invoke(parser)
    if parser.get("verbose"):
        pprint(parser)
        print(parser.debug())
    print("hello %s (%d)" % (parser.get("name"), parser.get("age")))
