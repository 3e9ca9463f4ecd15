"""
sites.py
--------

Per-data-point site store.

Holds one natural-parameter delta per observation. Every site starts at
the additive identity, so that right after construction

    global = prior + Σᵢ site[i] = prior.

A SiteStore is immutable: `with_site` returns a new store sharing every
other site. The engine swaps its store and its global parameters in one
assignment, so no reader ever observes one updated without the other.
"""

from __future__ import annotations

from collections.abc import Iterator

from epabc.gaussian.representation import GaussianRepresentation, NaturalParams


class SiteStore:
    """
    Site approximations for n data points.

    Parameters
    ----------
    representation : GaussianRepresentation
        Algebra used to build the zero element and sum sites.
    sites : tuple of NaturalParams
        One entry per data point.
    """

    def __init__(
        self, representation: GaussianRepresentation, sites: tuple[NaturalParams, ...]
    ):
        self.representation = representation
        self._sites = tuple(sites)

    @classmethod
    def zeros(cls, representation: GaussianRepresentation, n: int) -> SiteStore:
        """Store of n sites, all equal to the additive identity."""
        zero = representation.zeros()
        return cls(representation, (zero,) * n)

    def __len__(self) -> int:
        return len(self._sites)

    def __iter__(self) -> Iterator[NaturalParams]:
        return iter(self._sites)

    def __getitem__(self, index: int) -> NaturalParams:
        return self._sites[index]

    def site(self, index: int) -> NaturalParams:
        """Natural-parameter contribution of data point `index`."""
        return self._sites[index]

    def with_site(self, index: int, params: NaturalParams) -> SiteStore:
        """New store with site `index` replaced by `params`."""
        sites = list(self._sites)
        sites[index] = params
        return SiteStore(self.representation, tuple(sites))

    def total(self) -> NaturalParams:
        """Sum of all sites."""
        total = self.representation.zeros()
        for site in self._sites:
            total = self.representation.add(total, site)
        return total
