# Tests import the package as `src.nodegrad`; keep the repository root importable.
