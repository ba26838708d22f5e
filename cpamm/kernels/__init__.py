"""
Kernel layer.

`cpamm/kernels/python/` holds the integer math the pool engine is built on:
checked fixed-width arithmetic, the swap formula and the LP share formulas.
Nothing in this layer touches pool records or ledgers.
"""
