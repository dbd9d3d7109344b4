from pbfgen.io.pbf import Pbf

__all__ = ['Pbf']
