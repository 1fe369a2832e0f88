from quickshell import *

__styles__ = {
    "banner": "bold #22C55E",
}

shell = Shell("calc", "a small calculator shell")


@shell.command(
    "add",
    Argument("left", "first operand", type="decimal", mandatory=True),
    Argument("right", "second operand", type="decimal", mandatory=True),
    Flag("r", "round the result to an integer"),
)
def add(left, right, rounded) -> str:
    "adds two numbers"
    total = left + right
    return str(round(total) if rounded else total)


@shell.command(
    "repeat",
    Option("times", "how many copies", type="int", choices=("1", "2", "3")),
    Option("sep", "separator between copies"),
    Argument("text", "the text to repeat", mandatory=True),
)
def repeat(times, sep, text) -> str:
    "repeats a text"
    return (sep if sep is not None else "\n").join([text] * times)


if __name__ == '__main__':
    raise SystemExit(shell.run())
