"""Remote lookup sources."""

from namesweep.sources.mowojang import LookupClient, MowojangClient

__all__ = ["LookupClient", "MowojangClient"]
