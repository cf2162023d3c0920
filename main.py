from rich.pretty import pprint

from bindery import *

iterations = Cell()
seeds = []
name = Cell()
help = Cell()

registry = Registry("simulate", shell=True, colorful=True)
registry.register(Kind.INT, iterations, "--iterations", "The number of iterations to perform.")
registry.register(Kind.FLOAT, seeds, "--seeds", "The seeds to begin simulation.", nargs=3, required=False)
registry.register(Kind.STRING, name, "--name", "The name for this simulation run.", default="simulation")
registry.register(Kind.BOOL, help, "--help", "Shows this help message.")


if __name__ == '__main__':
    registry.parse()
    if help.value:
        print(registry.render_help())
        raise SystemExit(0)
    pprint(registry)
    pprint(dict(iterations=iterations.value, seeds=seeds, name=name.value))
