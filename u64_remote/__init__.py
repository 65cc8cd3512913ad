"""u64-remote - find a C64U / Ultimate 64 on the LAN and run programs on it."""

__version__ = "0.1.0"
