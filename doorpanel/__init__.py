# doorpanel/__init__.py
"""GT8-100D/2S-M door panel emulation for the Zusi 3 simulator."""

__version__ = "0.1.0"
