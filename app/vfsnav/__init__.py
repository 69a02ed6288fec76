"""vfsnav - unified directory browsing over real folders and archives.

Provides path resolution into archives, virtual directory listings,
batched copy/move transfers with progress, and cached directory sizes.
"""

__version__ = "0.1.0"
