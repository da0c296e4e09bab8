"""Evaluation of the search against random opponents."""

from cambio.evaluation.arena import Arena, revealed_card

__all__ = ['Arena', 'revealed_card']
