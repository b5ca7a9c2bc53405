"""
Sequences Package

This package contains reader drivers and their protocol libraries.
Each entry is a self-contained package with its own drivers and
protocol implementation.

Available packages:
- ru5102_reader: Chafon RU5102 UHF RFID reader (inventory, memory read)
"""

__all__ = ["ru5102_reader"]
