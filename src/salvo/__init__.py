"""Salvo: Battleship against a probability-density opponent."""

__version__ = "0.1.0"
