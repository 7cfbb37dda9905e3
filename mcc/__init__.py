"""Minecraft Compose - declarative lifecycle for a containerized Minecraft server."""

__version__ = "0.1.0"
