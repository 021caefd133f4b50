# mangalyze
# Terminal catalog browser and chapter reader for MangaDex-compatible catalog services.
__version__ = "0.1.0"
