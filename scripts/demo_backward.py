"""
Build w = (x + y) * x for x = 2, y = 3, backpropagate, and print every node.

Expected gradients: dw/dx = 7, dw/dy = 2, dw/dz = 2.
"""

from __future__ import annotations

import os
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


def main() -> None:
    from nodegrad import backward, leaf, use_graph

    with use_graph():
        x = leaf(2.0)
        y = leaf(3.0)
        z = x + y
        w = z * x

        backward(w)

        print("x:", x)
        print("y:", y)
        print("z:", z)
        print("w:", w)


if __name__ == "__main__":
    main()
