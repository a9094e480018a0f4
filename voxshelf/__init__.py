"""Voxshelf core package.

Modules:
- discovery: depth-limited walk for work folders (RJ code directories)
- tracks: per-work track listing, natural ordering and total duration
- probe: ffprobe duration lookups
- gate: bounded concurrency gate shared by all probes
- tree: folder tree with stream/download URLs
- scanner: wires the pieces together for a library scan
- covers: cover image file naming and storage
- config: INI parsing and config object
"""
