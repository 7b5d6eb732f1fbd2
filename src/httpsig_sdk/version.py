"""Version information for the HTTP message signing SDK"""

__version__ = "0.1.0"
