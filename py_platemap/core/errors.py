"""Errors raised while building diagrams and heightmaps."""


class HeightmapError(ValueError):
    """Base class for heightmap construction failures."""


class SeedNotFoundError(HeightmapError):
    """A seed coordinate is not one of the diagram's sites."""

    def __init__(self, point):
        self.point = point
        super().__init__(f"Seed point {point!r} is not a site of the diagram")


class InsufficientSitesError(HeightmapError):
    """Too few sites to auto-select one seed per plate."""

    def __init__(self, n_sites: int, plate_count: int):
        self.n_sites = n_sites
        self.plate_count = plate_count
        super().__init__(
            f"Need at least {plate_count} sites to pick {plate_count} plate seeds, got {n_sites}"
        )


class PlateVectorMismatchError(HeightmapError):
    """Drift vectors do not line up with the seed points."""


class DiagramValidationError(HeightmapError):
    """The diagram's cells, sites and adjacency are inconsistent."""


class DiagramBuildError(HeightmapError):
    """A diagram could not be built from the given points."""
