"""Контролер збіжності ітераційних обчислень та GUI для порівняння розв'язувачів."""

__version__ = "1.0.0"
